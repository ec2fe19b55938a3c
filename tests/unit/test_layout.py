import asyncio
import unittest

import numpy as np

from layoutsmith.entities.description import LayoutDescription
from layoutsmith.entities.layout import Layout
from layoutsmith.errors import MalformedDescriptionError
from layoutsmith.scene.resource_pool import ResourcePool
from tests.unit.mock_utils import (
    FakeAssetFetcher,
    make_box_glb,
    sample_layout_description,
)


class TestLayout(unittest.TestCase):
    """Test Layout hydration, asset loading and cloning."""

    def setUp(self):
        """Set up test fixtures."""
        self.pool = ResourcePool()
        self.fetcher = FakeAssetFetcher({"models/sofa.glb": make_box_glb([2, 1, 1])})

    def test_hydrate(self):
        """Test the layout tree mirrors the description."""
        layout = Layout.hydrate(sample_layout_description(), self.pool)

        self.assertEqual(layout.layout_id, "apartment-1")
        self.assertEqual(layout.node_id, "apartment-1")
        self.assertEqual(layout.description, "Two room apartment")
        self.assertEqual([r.name for r in layout.rooms], ["Living room", "Bedroom"])
        self.assertEqual([f.name for f in layout.iter_furniture()], ["Sofa", "Lamp"])
        self.assertEqual(layout.camera_view.look_target, (0.0, 0.0, 0.0))
        self.assertFalse(layout.is_master)
        self.assertFalse(layout.assets_loaded)
        self.assertTrue(layout.has_model_references)

    def test_hydrate_accepts_parsed_description(self):
        """Test hydrate takes a LayoutDescription too."""
        description = LayoutDescription.from_dict(sample_layout_description())
        layout = Layout.hydrate(description, self.pool)
        self.assertEqual(len(layout.rooms), 2)

    def test_hydrate_malformed(self):
        """Test malformed descriptions raise without a partial layout."""
        data = sample_layout_description()
        data["rooms"][1]["width"] = -1
        with self.assertRaises(MalformedDescriptionError):
            Layout.hydrate(data, self.pool)

    def test_empty_layout(self):
        """Test a layout without rooms is valid."""
        layout = Layout.hydrate({"id": "empty", "name": "Empty"}, self.pool)
        self.assertEqual(layout.rooms, ())
        self.assertFalse(layout.has_model_references)

        report = asyncio.run(layout.load_assets(self.fetcher))
        self.assertEqual(report.results, [])
        self.assertTrue(layout.assets_loaded)

    def test_load_assets(self):
        """Test models load and a report is returned."""
        layout = Layout.hydrate(sample_layout_description(), self.pool)

        report = asyncio.run(layout.load_assets(self.fetcher))

        self.assertTrue(layout.assets_loaded)
        self.assertEqual([r.furniture_name for r in report.loaded], ["Sofa"])
        self.assertEqual([r.furniture_name for r in report.skipped], ["Lamp"])
        sofa, lamp = layout.iter_furniture()
        self.assertTrue(sofa.has_loaded_model)
        self.assertTrue(lamp.is_placeholder)

    def test_clone_keeps_layout_id_and_isolates_state(self):
        """Test session clones share the id but no mutable state."""
        master = Layout.hydrate(sample_layout_description(), self.pool)
        asyncio.run(master.load_assets(self.fetcher))
        master._set_master(True)

        session = master.clone()

        self.assertEqual(session.layout_id, master.layout_id)
        self.assertEqual(session.node_id, master.node_id)
        self.assertFalse(session.is_master)
        self.assertTrue(session.assets_loaded)

        master_ids = {node.node_id for node in master.root.traverse()}
        session_ids = {node.node_id for node in session.root.traverse()}
        self.assertEqual(master_ids & session_ids, {"apartment-1"})

        session_sofa = next(session.iter_furniture())
        session_sofa.set_position(100, 0, 100)
        np.testing.assert_allclose(next(master.iter_furniture()).position, [1, 0, -2])

    def test_dispose_session_keeps_master_renderable(self):
        """Test disposing a session leaves master resources alive."""
        master = Layout.hydrate(sample_layout_description(), self.pool)
        asyncio.run(master.load_assets(self.fetcher))
        session = master.clone()

        session.dispose()

        self.assertTrue(session.is_disposed)
        for resource in master.root.iter_resources():
            self.assertFalse(resource.released)

    def test_dispose_master_releases_models(self):
        """Test disposing the master releases only its loaded models."""
        master = Layout.hydrate(sample_layout_description(), self.pool)
        asyncio.run(master.load_assets(self.fetcher))
        sofa = next(master.iter_furniture())

        master.dispose()

        self.assertTrue(all(r.released for r in sofa.content.iter_resources()))
        self.assertEqual(self.pool.size(), 2)
        for resource in (
            self.pool.get("unit_wall_box"),
            self.pool.get("placeholder_furniture_box"),
        ):
            self.assertFalse(resource.released)


if __name__ == "__main__":
    unittest.main()
