import unittest

import numpy as np

from layoutsmith.entities.base import EntityType
from layoutsmith.entities.wall import Wall
from layoutsmith.errors import MalformedDescriptionError
from layoutsmith.scene.resource_pool import ResourceKind, ResourcePool


class TestWall(unittest.TestCase):
    """Test Wall construction and cloning."""

    def setUp(self):
        """Set up test fixtures."""
        self.pool = ResourcePool()

    def test_walls_share_pooled_box(self):
        """Test every wall references the same unit box."""
        a = Wall(4, 3.5, 0.5, self.pool)
        b = Wall(0.5, 3.5, 6, self.pool)

        self.assertIs(a.resource, b.resource)
        self.assertIs(a.resource, self.pool.get(ResourceKind.UNIT_WALL_BOX))
        np.testing.assert_allclose(a.root.transform.scale, [4, 3.5, 0.5])
        self.assertEqual(a.root.metadata["entity_type"], EntityType.WALL.value)

    def test_rejects_non_positive_dimensions(self):
        """Test invalid dimensions raise."""
        with self.assertRaises(ValueError):
            Wall(0, 1, 1, self.pool)

    def test_clone(self):
        """Test clones share geometry but not transforms or ids."""
        wall = Wall(4, 3.5, 0.5, self.pool)
        wall.set_position(0, 1.75, -3)

        copy = wall.clone()

        self.assertNotEqual(copy.node_id, wall.node_id)
        self.assertIs(copy.resource, wall.resource)
        np.testing.assert_allclose(copy.root.transform.position, [0, 1.75, -3])
        np.testing.assert_allclose(copy.root.transform.scale, [4, 3.5, 0.5])

        copy.set_position(5, 5, 5)
        np.testing.assert_allclose(wall.root.transform.position, [0, 1.75, -3])

    def test_hydrate(self):
        """Test hydrating from a description."""
        wall = Wall.hydrate(
            {"width": 2, "height": 3, "depth": 0.2, "position": [1, 1.5, 0]}, self.pool
        )
        self.assertEqual((wall.width, wall.height, wall.depth), (2.0, 3.0, 0.2))
        np.testing.assert_allclose(wall.root.transform.position, [1, 1.5, 0])

    def test_hydrate_invalid(self):
        """Test malformed wall descriptions raise."""
        for description in ({"width": 2, "height": 3}, {"width": -1, "height": 3, "depth": 1}):
            with self.subTest(description=description):
                with self.assertRaises(MalformedDescriptionError):
                    Wall.hydrate(description, self.pool)

    def test_dispose_keeps_pooled_box(self):
        """Test disposing a wall never frees the shared box."""
        wall = Wall(4, 3.5, 0.5, self.pool)
        wall.dispose()
        wall.dispose()

        self.assertTrue(wall.is_disposed)
        self.assertFalse(self.pool.get(ResourceKind.UNIT_WALL_BOX).released)


if __name__ == "__main__":
    unittest.main()
