import unittest
from treatplan.domain.Patient import Patient
from treatplan.domain.Plan import Plan
from treatplan.logic.composer.builder import build_items, format_quantity
from treatplan.logic.composer.controller import ComposerController
from treatplan.logic.composer.session import AddEntrySession
from treatplan.logic.sync.manager import SyncManager
from treatplan.events.Event_Bus import EventBus
from treatplan.tests.reference_fixture import (
    FakeRecordStore, SequentialIds, fixed_clock, fixture_reference, make_item,
)


class TestAddEntrySession(unittest.TestCase):

    def setUp(self):
        self.session = AddEntrySession(fixture_reference(), known_interests=["Fade Scars"])

    def test_same_mode_twice_clears_selections(self):
        self.session.set_mode("finding")
        self.session.toggle_finding("Forehead Wrinkles")
        self.session.set_mode("finding")
        self.assertEqual(self.session.mode, "finding")
        self.assertEqual(self.session.findings, [])

    def test_switching_mode_resets(self):
        self.session.set_mode("goal")
        self.session.select_goal("Smoothen Fine Lines")
        self.session.set_mode("treatment")
        self.assertIsNone(self.session.goal)
        with self.assertRaises(ValueError):
            self.session.set_mode("colour")

    def test_goal_mode_filters_treatments_and_is_radio(self):
        s = self.session
        s.set_mode("goal")
        s.select_goal("Smoothen Fine Lines")
        self.assertEqual(s.treatment_options(), ["Neurotoxin", "Laser"])
        s.select_treatment("Neurotoxin")
        s.select_treatment("Laser")
        self.assertEqual(s.effective_treatments(), ["Laser"])
        s.select_treatment("Other", "Hydrafacial")
        self.assertEqual(s.effective_treatments(), ["Hydrafacial"])
        self.assertEqual(s.goal_options()[0], "Fade Scars")

    def test_finding_mode_multiple_regions(self):
        s = self.session
        s.set_mode("finding")
        s.toggle_finding("Forehead Wrinkles")
        s.toggle_finding("Mid Cheek Flattening")
        self.assertEqual(s.derived_region(), "Multiple")
        self.assertEqual(s.derived_interest(), "Smoothen Fine Lines, Improve Cheek Definition")
        self.assertEqual(s.treatment_options(), ["Neurotoxin", "Laser", "Filler"])

    def test_treatment_outside_filtered_options_ignored(self):
        s = self.session
        s.set_mode("goal")
        s.select_goal("Smoothen Fine Lines")
        s.select_treatment("Laser")
        self.assertFalse(s.select_treatment("Filler"))
        self.assertEqual(s.treatments, ["Laser"])
        s.set_mode("finding")
        s.toggle_finding("Forehead Wrinkles")
        self.assertFalse(s.select_treatment("Chemical Peel"))
        self.assertEqual(s.treatments, [])
        self.assertTrue(s.select_treatment("Neurotoxin"))

    def test_finding_mode_single_region(self):
        s = self.session
        s.set_mode("finding")
        s.toggle_finding("Forehead Wrinkles")
        s.toggle_finding("Bunny Lines")
        self.assertEqual(s.derived_region(), "Forehead")
        self.assertEqual(s.derived_interest(), "Smoothen Fine Lines")

    def test_finding_mode_drops_treatments_no_longer_offered(self):
        s = self.session
        s.set_mode("finding")
        s.toggle_finding("Dark Spots")
        s.select_treatment("Laser")
        s.select_treatment("Chemical Peel")
        self.assertEqual(s.treatments, ["Laser", "Chemical Peel"])
        s.select_treatment("Laser")
        self.assertEqual(s.treatments, ["Chemical Peel"])
        s.toggle_finding("Dark Spots")
        self.assertEqual(s.treatments, [])

    def test_treatment_mode_offers_relevant_findings(self):
        s = self.session
        s.set_mode("treatment")
        s.select_treatment("Laser")
        self.assertEqual(s.finding_options(), ["Forehead Wrinkles", "Bunny Lines", "Dark Spots"])
        s.toggle_finding("Dark Spots")
        self.assertEqual(s.derived_region(), "Skin")
        s.select_treatment("Filler")
        self.assertEqual(s.findings, [])

    def test_products_single_vs_multiple(self):
        s = self.session
        s.set_mode("treatment")
        s.select_product("Neurotoxin", "Botox")
        s.select_product("Neurotoxin", "Dysport")
        self.assertEqual(s.resolved_products("Neurotoxin"), ["Dysport"])
        s.select_product("Skincare", "Serum")
        s.select_product("Skincare", "Cleanser")
        s.select_product("Skincare", "Serum")
        self.assertEqual(s.resolved_products("Skincare"), ["Cleanser"])

    def test_other_product_with_empty_text_dropped(self):
        s = self.session
        s.set_mode("treatment")
        s.select_treatment("Neurotoxin")
        s.select_product("Neurotoxin", "Other", "")
        with self.assertLogs("treatplan.logic.composer.session", level="WARNING"):
            self.assertEqual(s.resolved_products("Neurotoxin"), [])
        s.set_other_product_text("Neurotoxin", "Jeuveau")
        self.assertEqual(s.resolved_products("Neurotoxin"), ["Jeuveau"])

    def test_select_goal_outside_goal_mode_ignored(self):
        self.session.set_mode("finding")
        self.assertFalse(self.session.select_goal("Smoothen Fine Lines"))
        self.assertIsNone(self.session.goal)

    def test_set_details_validation(self):
        with self.assertRaises(ValueError):
            self.session.set_details(timeline="Later")
        with self.assertRaises(ValueError):
            self.session.set_details(colour="red")
        self.session.set_details(notes="  ", recurring="Yearly")
        self.assertIsNone(self.session.notes)
        self.assertEqual(self.session.recurring, "Yearly")

    def test_can_add(self):
        s = self.session
        self.assertFalse(s.can_add)
        s.set_mode("goal")
        self.assertFalse(s.can_add)
        s.select_goal("Other", "")
        self.assertFalse(s.can_add)
        s.select_goal("Other", "Fade scars")
        self.assertTrue(s.can_add)

    def test_to_dict_echoes_state(self):
        s = self.session
        s.set_mode("treatment")
        s.select_treatment("Neurotoxin")
        data = s.to_dict()
        self.assertEqual(data["mode"], "treatment")
        self.assertEqual(data["treatments"], ["Neurotoxin"])
        self.assertEqual(data["quantity_unit"], "Units")
        self.assertTrue(data["can_add"])


class TestBuildItems(unittest.TestCase):

    def setUp(self):
        self.session = AddEntrySession(fixture_reference())
        self.ids = SequentialIds()
        self.clock = fixed_clock()

    def build(self):
        return build_items(self.session, self.ids, self.clock)

    def test_format_quantity(self):
        self.assertEqual(format_quantity("20", "Units"), "20 Units")
        self.assertEqual(format_quantity("2", "Quantity"), "2")
        self.assertEqual(format_quantity("3", None), "3")
        self.assertIsNone(format_quantity("", "Units"))

    def test_disabled_add_yields_nothing(self):
        self.assertEqual(self.build(), [])
        self.session.set_mode("finding")
        self.assertEqual(self.build(), [])

    def test_neurotoxin_botox_item(self):
        s = self.session
        s.set_mode("goal")
        s.select_goal("Smoothen Fine Lines")
        s.select_treatment("Neurotoxin")
        s.select_product("Neurotoxin", "Botox")
        s.set_details(quantity="20", quantity_unit="Units", timeline="Now")
        items = self.build()
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].to_dict(), {
            "id": "item-1",
            "addedAt": "2025-01-15T10:00:00.000Z",
            "interest": "Smoothen Fine Lines",
            "treatment": "Neurotoxin",
            "product": "Botox",
            "timeline": "Now",
            "quantity": "20 Units",
        })

    def test_cross_product_yields_four_items_sharing_fields(self):
        s = self.session
        s.set_mode("finding")
        s.toggle_finding("Dark Spots")
        s.select_treatment("Skincare")
        for product in ("Cleanser", "Serum", "Sunscreen"):
            s.select_product("Skincare", product)
        s.select_treatment("Other", "Hydrafacial")
        s.set_details(timeline="Now", notes="Discussed at consult", recurring="Yearly", brand="House")
        items = self.build()
        self.assertEqual(len(items), 4)
        self.assertEqual(len({i.id for i in items}), 4)
        for item in items:
            self.assertEqual(item.added_at, "2025-01-15T10:00:00.000Z")
            self.assertEqual(item.interest, "Even Skin Tone")
            self.assertEqual(item.region, "Skin")
            self.assertEqual(item.notes, "Discussed at consult")
            self.assertEqual(item.recurring, "Yearly")
            self.assertEqual(item.brand, "House")
            self.assertEqual(item.findings, ["Dark Spots"])
        skincare = [i for i in items if i.treatment == "Skincare"]
        self.assertEqual(sorted(i.product for i in skincare), ["Cleanser", "Serum", "Sunscreen"])
        self.assertTrue(all(i.timeline == "Skincare" for i in skincare))
        other = [i for i in items if i.treatment == "Hydrafacial"][0]
        self.assertIsNone(other.product)
        self.assertEqual(other.timeline, "Now")

    def test_goal_only_substitution(self):
        s = self.session
        s.set_mode("goal")
        s.select_goal("Other", "Fade scars")
        items = self.build()
        self.assertEqual([i.treatment for i in items], ["Goal only"])
        self.assertEqual(items[0].interest, "Fade scars")
        self.assertEqual(items[0].timeline, "Wishlist")

    def test_finding_only_substitution_uses_multiple_region(self):
        s = self.session
        s.set_mode("finding")
        s.toggle_finding("Forehead Wrinkles")
        s.toggle_finding("Mid Cheek Flattening")
        items = self.build()
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].treatment, "Goal only")
        self.assertEqual(items[0].region, "Multiple")

    def test_quantity_unit_defaults_from_treatment(self):
        s = self.session
        s.set_mode("treatment")
        s.select_treatment("Laser")
        s.set_details(quantity="2")
        self.assertEqual(self.build()[0].quantity, "2 Sessions")


class TestComposerController(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.plan = Plan("p1", [make_item("old", "Laser", "Now")])
        self.patient = Patient("p1", "Jane Doe")
        self.session = AddEntrySession(fixture_reference())

    def _controller(self, store):
        sync = SyncManager(self.plan, store, self.patient, bus=EventBus())
        return ComposerController(self.session, sync, SequentialIds(), fixed_clock())

    def _prepare(self):
        self.session.set_mode("treatment")
        self.session.select_treatment("Filler")
        self.session.select_product("Filler", "Juvederm")

    async def test_add_appends_and_resets_session(self):
        store = FakeRecordStore()
        controller = self._controller(store)
        self._prepare()
        added = await controller.add_to_plan()
        self.assertEqual([i.treatment for i in added], ["Filler"])
        self.assertEqual([i.id for i in self.plan.get_items()], ["old", "item-1"])
        self.assertIsNone(self.session.mode)
        self.assertEqual(len(store.calls), 1)

    async def test_failed_add_keeps_session_and_plan(self):
        store = FakeRecordStore(fail=True)
        controller = self._controller(store)
        self._prepare()
        before = self.plan.snapshot()
        added = await controller.add_to_plan()
        self.assertEqual(added, [])
        self.assertEqual(self.plan.get_items(), before)
        self.assertEqual(self.session.treatments, ["Filler"])

    async def test_disabled_add_issues_no_write(self):
        store = FakeRecordStore()
        controller = self._controller(store)
        self.assertEqual(await controller.add_to_plan(), [])
        self.assertEqual(store.calls, [])


if __name__ == "__main__":
    unittest.main()
