import unittest
from treatplan.domain.Patient import Patient
from treatplan.domain.Plan import Plan
from treatplan.events.Event_Bus import EventBus
from treatplan.logic.controllers.drag import DragController, is_legal_move
from treatplan.logic.controllers.lifecycle import LifecycleController, is_post_care_item
from treatplan.logic.sections.categorizer import categorize_map, section_for
from treatplan.logic.sync.manager import SyncManager
from treatplan.tests.reference_fixture import FakeRecordStore, SequentialIds, fixed_clock, make_item


class ControllerTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.plan = Plan("p1", [
            make_item("now", "Neurotoxin", "Now", product="Botox", notes="Forehead"),
            make_item("done", "Filler", "Completed"),
            make_item("skin", "Skincare", "Skincare", product="Serum"),
        ])
        self.store = FakeRecordStore()
        self.sync = SyncManager(self.plan, self.store, Patient("p1", "Jane"), bus=EventBus())


class TestDragController(ControllerTestCase):

    def setUp(self):
        super().setUp()
        self.drag = DragController(self.sync)

    def test_is_legal_move(self):
        self.assertTrue(is_legal_move(False, "Now", "Wishlist"))
        self.assertFalse(is_legal_move(False, "Now", "Now"))
        self.assertFalse(is_legal_move(False, "Now", "Skincare"))
        self.assertFalse(is_legal_move(True, "Skincare", "Now"))
        self.assertFalse(is_legal_move(False, "Now", "Elsewhere"))

    async def test_move_rewrites_timeline_and_commits(self):
        self.assertTrue(await self.drag.move("now", "Add next visit"))
        item = self.plan.find("now")
        self.assertEqual(item.timeline, "Add next visit")
        self.assertEqual(section_for(item), "Add next visit")
        self.assertEqual(len(self.store.calls), 1)

    async def test_move_non_skincare_into_skincare_is_noop(self):
        before = self.plan.snapshot()
        self.assertFalse(await self.drag.move("now", "Skincare"))
        self.assertEqual(self.plan.get_items(), before)
        self.assertEqual(self.store.calls, [])

    async def test_move_skincare_out_is_noop(self):
        self.assertFalse(await self.drag.move("skin", "Now"))
        self.assertEqual(self.plan.find("skin").timeline, "Skincare")
        self.assertEqual(self.store.calls, [])

    async def test_same_section_and_unknown_item_are_noops(self):
        self.assertFalse(await self.drag.move("now", "Now"))
        self.assertFalse(await self.drag.move("missing", "Now"))
        self.assertEqual(self.store.calls, [])

    async def test_failed_move_rolls_back(self):
        self.store.fail = True
        self.assertFalse(await self.drag.move("now", "Wishlist"))
        self.assertEqual(self.plan.find("now").timeline, "Now")


class TestLifecycleController(ControllerTestCase):

    def setUp(self):
        super().setUp()
        self.lifecycle = LifecycleController(self.sync, SequentialIds("new"), fixed_clock("2025-02-01T09:30:00.000Z"))

    async def test_mark_completed(self):
        self.assertTrue(await self.lifecycle.mark_completed("now"))
        self.assertEqual(self.plan.find("now").timeline, "Completed")
        self.assertEqual(len(self.plan), 3)

    async def test_complete_and_add_next_visit_forks_item(self):
        self.assertTrue(await self.lifecycle.complete_and_add_next_visit("now"))
        self.assertIsNone(self.plan.find("now"))
        forked = self.plan.find("new-1")
        self.assertEqual(forked.timeline, "Add next visit")
        self.assertIsNone(forked.notes)
        self.assertEqual(forked.added_at, "2025-02-01T09:30:00.000Z")
        self.assertEqual(forked.product, "Botox")
        self.assertEqual(len(self.store.calls), 1)

    async def test_add_again_keeps_identity(self):
        original_added = self.plan.find("done").added_at
        self.assertTrue(await self.lifecycle.add_again("done"))
        item = self.plan.find("done")
        self.assertEqual(item.timeline, "Add next visit")
        self.assertEqual(item.added_at, original_added)
        buckets = categorize_map(self.plan.get_items())
        self.assertEqual([i.id for i in buckets["Add next visit"]], ["done"])
        self.assertEqual(buckets["Completed"], [])

    async def test_add_again_only_from_completed(self):
        self.assertFalse(await self.lifecycle.add_again("now"))
        self.assertEqual(self.store.calls, [])

    async def test_remove_requires_confirmation(self):
        self.assertFalse(await self.lifecycle.confirm_remove("now"))
        self.assertIsNotNone(self.plan.find("now"))
        self.assertTrue(self.lifecycle.request_remove("now"))
        self.lifecycle.cancel_remove()
        self.assertFalse(await self.lifecycle.confirm_remove("now"))
        self.lifecycle.request_remove("now")
        self.assertTrue(await self.lifecycle.confirm_remove())
        self.assertIsNone(self.plan.find("now"))
        self.assertEqual(len(self.store.calls), 1)

    async def test_confirm_other_item_ignored(self):
        self.lifecycle.request_remove("now")
        self.assertFalse(await self.lifecycle.confirm_remove("done"))
        self.assertEqual(len(self.plan), 3)

    async def test_edit_preserves_identity(self):
        before = self.plan.find("now")
        ok = await self.lifecycle.edit("now", product="Dysport", quantity="40", quantity_unit="Units",
                                       timeline="Wishlist", notes="")
        self.assertTrue(ok)
        item = self.plan.find("now")
        self.assertEqual(item.id, before.id)
        self.assertEqual(item.added_at, before.added_at)
        self.assertEqual(item.product, "Dysport")
        self.assertEqual(item.quantity, "40 Units")
        self.assertEqual(item.timeline, "Wishlist")
        self.assertIsNone(item.notes)
        self.assertEqual(item.treatment, "Neurotoxin")

    async def test_edit_empty_treatment_is_noop(self):
        self.assertFalse(await self.lifecycle.edit("now", treatment="  "))
        self.assertEqual(self.plan.find("now").treatment, "Neurotoxin")
        self.assertEqual(self.store.calls, [])

    async def test_edit_to_skincare_forces_skincare_timeline(self):
        await self.lifecycle.edit("done", treatment="Skincare", timeline="Now")
        self.assertEqual(self.plan.find("done").timeline, "Skincare")
        await self.lifecycle.edit("skin", treatment="Laser")
        self.assertEqual(self.plan.find("skin").timeline, "Wishlist")

    async def test_failed_edit_rolls_back(self):
        self.store.fail = True
        self.assertFalse(await self.lifecycle.edit("now", notes="changed"))
        self.assertEqual(self.plan.find("now").notes, "Forehead")

    async def test_post_care_add_is_idempotent(self):
        self.assertTrue(self.lifecycle.can_add_post_care("Sunscreen"))
        self.assertTrue(await self.lifecycle.add_post_care_product("Laser", "Sunscreen"))
        added = self.plan.find("new-1")
        self.assertEqual(added.treatment, "Skincare")
        self.assertEqual(added.timeline, "Skincare")
        self.assertEqual(added.notes, "Post care for Laser")
        self.assertTrue(is_post_care_item(added))
        self.assertFalse(self.lifecycle.can_add_post_care("Sunscreen"))
        self.assertFalse(await self.lifecycle.add_post_care_product("Laser", "Sunscreen"))
        self.assertEqual(len(self.store.calls), 1)

    async def test_post_care_ignores_plain_skincare_with_same_product(self):
        # "Serum" is already planned, but not as post-care
        self.assertTrue(self.lifecycle.can_add_post_care("Serum"))


if __name__ == "__main__":
    unittest.main()
