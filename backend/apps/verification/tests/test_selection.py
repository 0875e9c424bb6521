"""
Tests for the bulk selection set.
"""
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase
from apps.verification.services.selection import (
    CHECKED,
    INDETERMINATE,
    UNCHECKED,
    SelectionSet,
    SessionSelectionStore,
)

VISIBLE = [
    {'kind': 'vendor', 'id': '1'},
    {'kind': 'vendor', 'id': '2'},
    {'kind': 'restaurant', 'id': '1'},
]


class SelectionSetTestCase(SimpleTestCase):

    def setUp(self):
        self.selection = SelectionSet.for_queue('approvals')

    def test_toggle_adds_and_removes(self):
        selected = self.selection.toggle('vendor', '1')
        self.assertIn(('vendor', '1'), selected)

        cleared = selected.toggle('vendor', '1')
        self.assertNotIn(('vendor', '1'), cleared)
        self.assertEqual(len(cleared), 0)

    def test_transitions_do_not_mutate(self):
        selected = self.selection.toggle('vendor', '1')

        self.assertEqual(len(self.selection), 0)
        self.assertEqual(len(selected), 1)

    def test_same_id_different_kinds(self):
        selected = self.selection.toggle('vendor', '1').toggle('restaurant', '1')

        self.assertEqual(len(selected), 2)
        self.assertEqual(selected.count_by_kind(), {'vendor': 1, 'restaurant': 1})
        self.assertEqual(selected.ids('restaurant'), ['1'])

    def test_select_all_then_toggle(self):
        selected = self.selection.select_all(VISIBLE)
        self.assertTrue(selected.is_all_selected(VISIBLE))
        self.assertFalse(selected.is_partially_selected(VISIBLE))
        self.assertEqual(selected.checkbox_state(VISIBLE), CHECKED)

        toggled = selected.toggle('vendor', '2')
        self.assertFalse(toggled.is_all_selected(VISIBLE))
        self.assertTrue(toggled.is_partially_selected(VISIBLE))
        self.assertEqual(toggled.checkbox_state(VISIBLE), INDETERMINATE)

    def test_select_all_replaces_selection(self):
        selected = self.selection.toggle('restaurant', '99').select_all(VISIBLE[:2])

        self.assertNotIn(('restaurant', '99'), selected)
        self.assertEqual(selected.ids(), ['1', '2'])

    def test_clear(self):
        cleared = self.selection.select_all(VISIBLE).clear()

        self.assertEqual(len(cleared), 0)
        self.assertEqual(cleared.checkbox_state(VISIBLE), UNCHECKED)

    def test_empty_visible_items(self):
        selected = self.selection.select_all(VISIBLE)

        self.assertFalse(selected.is_all_selected([]))
        self.assertEqual(selected.checkbox_state([]), UNCHECKED)

    def test_insertion_order_is_kept(self):
        selected = self.selection.toggle('vendor', '3').toggle('restaurant', '1').toggle('vendor', '2')

        self.assertEqual(list(selected), [('vendor', '3'), ('restaurant', '1'), ('vendor', '2')])

    def test_unknown_kind_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.selection.toggle('listing', '1')
        with self.assertRaises(ValidationError):
            self.selection.toggle('spaceship', '1')

    def test_queues_are_independent(self):
        listings = SelectionSet.for_queue('listings').toggle('listing', 'a')

        with self.assertRaises(ValidationError):
            listings.toggle('vendor', '1')
        with self.assertRaises(ValidationError):
            SelectionSet.for_queue('orders')


class SessionSelectionStoreTestCase(SimpleTestCase):

    def test_round_trip_per_queue(self):
        session = {}
        store = SessionSelectionStore(session)

        store.save('approvals', store.load('approvals').toggle('vendor', '1'))
        store.save('listings', store.load('listings').toggle('listing', 'abc'))

        self.assertEqual(list(store.load('approvals')), [('vendor', '1')])
        self.assertEqual(list(store.load('listings')), [('listing', 'abc')])
        self.assertEqual(len(store.load('categories')), 0)
