import unittest
from itertools import product

from sensebox_api.core.errors import ValidationError
from sensebox_api.schemas.sensor import SensorDescriptor
from sensebox_api.services.sensor_changes import (
    SensorCreate,
    SensorDelete,
    SensorUpdate,
    classify,
    classify_batch,
)

class TestClassify(unittest.TestCase):
    """Test cases for sensor descriptor classification"""

    def test_deleted_wins_over_other_flags(self):
        """deleted=true is always a delete, whatever edited/new say"""
        for edited, new in product([False, True], repeat=2):
            descriptor = SensorDescriptor(**{"_id": "s2", "deleted": True, "edited": edited, "new": new, "title": "X"})
            self.assertEqual(classify(descriptor), SensorDelete(sensor_id="s2"))

    def test_delete_requires_id(self):
        with self.assertRaises(ValidationError) as ctx:
            classify(SensorDescriptor(deleted=True), position=4)
        self.assertIn("position 4", ctx.exception.message)

    def test_edited_and_new_creates(self):
        change = classify(SensorDescriptor(**{
            "title": "X", "unit": "C", "sensorType": "TempSensor",
            "icon": "osem-thermometer", "edited": True, "new": True,
        }))

        self.assertIsInstance(change, SensorCreate)
        self.assertEqual(change.title, "X")
        self.assertEqual(change.unit, "C")
        self.assertEqual(change.sensor_type, "TempSensor")
        self.assertEqual(change.icon, "osem-thermometer")
        self.assertEqual(len(change.sensor_id), 32)

    def test_create_keeps_supplied_id(self):
        change = classify(SensorDescriptor(**{
            "_id": "custom", "title": "X", "unit": "C", "sensorType": "T", "edited": True, "new": True,
        }))

        self.assertEqual(change.sensor_id, "custom")

    def test_create_requires_mandatory_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            classify(SensorDescriptor(title="X", edited=True, new=True))
        self.assertIn("unit", ctx.exception.message)
        self.assertIn("sensorType", ctx.exception.message)

    def test_create_rejects_blank_title(self):
        with self.assertRaises(ValidationError):
            classify(SensorDescriptor(**{"title": " ", "unit": "C", "sensorType": "T", "edited": True, "new": True}))

    def test_edited_updates_sparsely(self):
        change = classify(SensorDescriptor(**{"_id": "s1", "edited": True, "title": "Temp"}))

        self.assertEqual(change, SensorUpdate(sensor_id="s1", title="Temp"))
        self.assertEqual(
            [column for column, value in change.fields() if value is not None],
            ["title"],
        )

    def test_update_requires_id(self):
        with self.assertRaises(ValidationError):
            classify(SensorDescriptor(edited=True, title="Temp"))

    def test_no_flags_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            classify(SensorDescriptor(**{"_id": "s1", "title": "Temp"}))
        self.assertIn("s1", ctx.exception.message)

    def test_new_without_edited_rejected(self):
        with self.assertRaises(ValidationError):
            classify(SensorDescriptor(**{"_id": "s1", "new": True, "title": "X", "unit": "C", "sensorType": "T"}))

    def test_string_flags_from_json(self):
        """Clients send "edited": "true" as documented for the old API"""
        change = classify(SensorDescriptor(**{"_id": "s1", "edited": "true"}))

        self.assertIsInstance(change, SensorUpdate)

    def test_null_flags_are_unset(self):
        descriptor = SensorDescriptor(**{"_id": "s1", "edited": True, "deleted": None, "new": None, "title": "T"})

        self.assertEqual(classify(descriptor), SensorUpdate(sensor_id="s1", title="T"))

    def test_false_string_flag_is_unset(self):
        descriptor = SensorDescriptor(**{"_id": "s1", "edited": "true", "deleted": "false", "title": "T"})

        self.assertIsInstance(classify(descriptor), SensorUpdate)
        with self.assertRaises(ValidationError):
            classify(SensorDescriptor(**{"_id": "s1", "edited": "false", "title": "T"}))

class TestClassifyBatch(unittest.TestCase):
    """Test cases for whole-batch classification"""

    def test_keeps_submission_order(self):
        changes = classify_batch([
            SensorDescriptor(**{"_id": "s2", "deleted": True}),
            SensorDescriptor(**{"title": "X", "unit": "C", "sensorType": "T", "edited": True, "new": True}),
            SensorDescriptor(**{"_id": "s1", "edited": True, "unit": "K"}),
        ])

        self.assertEqual([type(change) for change in changes], [SensorDelete, SensorCreate, SensorUpdate])

    def test_first_invalid_descriptor_aborts(self):
        with self.assertRaises(ValidationError) as ctx:
            classify_batch([
                SensorDescriptor(**{"_id": "s1", "edited": True}),
                SensorDescriptor(title="no flags"),
                SensorDescriptor(**{"_id": "s3"}),
            ])
        self.assertIn("position 1", ctx.exception.message)

    def test_empty_batch(self):
        self.assertEqual(classify_batch([]), [])

if __name__ == '__main__':
    unittest.main()
