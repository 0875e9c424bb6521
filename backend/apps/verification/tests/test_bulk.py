"""
Tests for the bulk action dispatcher.
"""
from unittest import mock
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase
from apps.verification.services.bulk import (
    BulkAction,
    BulkActionDispatcher,
    BulkActionRequest,
    verification_resolver,
)


class BulkActionDispatcherTestCase(SimpleTestCase):

    def setUp(self):
        self.dispatcher = BulkActionDispatcher(max_targets=5)
        self.resolver = mock.Mock(return_value=None)

    def test_partial_failure_is_collected(self):
        def resolve(kind, entity_id, action, data):
            if entity_id == 'id2':
                raise RuntimeError('listing is locked')

        request = BulkActionRequest(
            action=BulkAction.TOGGLE_FEATURED,
            target_ids=('id1', 'id2', 'id3'),
        )
        result = self.dispatcher.dispatch(request, resolve)

        self.assertEqual(result.succeeded, ['id1', 'id3'])
        self.assertEqual(len(result.failed), 1)
        self.assertEqual(result.failed[0]['id'], 'id2')
        self.assertIsInstance(result.failed[0]['error'], RuntimeError)
        self.assertFalse(result.all_succeeded)

        data = result.to_dict()
        self.assertEqual(data['failed'][0]['error'], 'listing is locked')
        self.assertEqual(data['summary'], {'requested': 3, 'succeeded': 2, 'failed': 1, 'skipped': 0})

    def test_every_target_is_dispatched_in_order(self):
        request = BulkActionRequest(
            action=BulkAction.UPDATE_STATUS,
            target_ids=('a', 'b', 'c'),
            data={'status': 'inactive'},
        )
        result = self.dispatcher.dispatch(request, self.resolver)

        self.assertEqual(
            [call.args[1] for call in self.resolver.call_args_list],
            ['a', 'b', 'c']
        )
        self.resolver.assert_any_call('listing', 'a', 'update_status', {'status': 'inactive', 'reason': ''})
        self.assertTrue(result.all_succeeded)

    def test_reason_required(self):
        required = [
            BulkAction.FLAG_LISTINGS,
            BulkAction.DELETE_LISTINGS,
            BulkAction.FLAG_CATEGORIES,
            BulkAction.DELETE_CATEGORIES,
            BulkAction.APPROVE_VERIFICATION,
            BulkAction.REJECT_VERIFICATION,
            BulkAction.RESET_VERIFICATION,
        ]
        for action in required:
            with self.subTest(action=action):
                request = BulkActionRequest(
                    action=action,
                    target_ids=(('vendor', '1'),) if 'verification' in action else ('1',),
                    data={'flag_reason': 'spam'},
                    reason='  ',
                )
                with self.assertRaises(ValidationError) as ctx:
                    self.dispatcher.dispatch(request, self.resolver)
                self.assertIn('reason', ctx.exception.message_dict)
        self.resolver.assert_not_called()

    def test_reason_optional(self):
        for action in (BulkAction.TOGGLE_FEATURED, BulkAction.UNFLAG_LISTINGS, BulkAction.UNFLAG_CATEGORIES):
            with self.subTest(action=action):
                result = self.dispatcher.dispatch(
                    BulkActionRequest(action=action, target_ids=('1',)), self.resolver
                )
                self.assertEqual(result.succeeded, ['1'])

    def test_empty_targets(self):
        with self.assertRaises(ValidationError) as ctx:
            self.dispatcher.dispatch(BulkActionRequest(action=BulkAction.TOGGLE_FEATURED), self.resolver)

        self.assertIn('target_ids', ctx.exception.message_dict)
        self.resolver.assert_not_called()

    def test_missing_or_unknown_action(self):
        for action in ('', 'archive_listings'):
            with self.subTest(action=action):
                with self.assertRaises(ValidationError) as ctx:
                    self.dispatcher.dispatch(BulkActionRequest(action=action, target_ids=('1',)), self.resolver)
                self.assertIn('action', ctx.exception.message_dict)
        self.resolver.assert_not_called()

    def test_too_many_targets(self):
        request = BulkActionRequest(action=BulkAction.TOGGLE_FEATURED, target_ids=tuple(str(i) for i in range(6)))

        with self.assertRaises(ValidationError):
            self.dispatcher.dispatch(request, self.resolver)
        self.resolver.assert_not_called()

    def test_required_data(self):
        missing = BulkActionRequest(action=BulkAction.UPDATE_STATUS, target_ids=('1',))
        invalid = BulkActionRequest(action=BulkAction.UPDATE_STATUS, target_ids=('1',), data={'status': 'sold'})
        bad_flag = BulkActionRequest(
            action=BulkAction.FLAG_LISTINGS, target_ids=('1',), data={'flag_reason': 'ugly'}, reason='x'
        )

        for request, field in ((missing, 'status'), (invalid, 'status'), (bad_flag, 'flag_reason')):
            with self.subTest(field=field, data=request.data):
                with self.assertRaises(ValidationError) as ctx:
                    self.dispatcher.dispatch(request, self.resolver)
                self.assertIn(field, ctx.exception.message_dict)
        self.resolver.assert_not_called()

    def test_category_reason_length(self):
        request = BulkActionRequest(action=BulkAction.FLAG_CATEGORIES, target_ids=('1',), reason='x' * 501)

        with self.assertRaises(ValidationError):
            self.dispatcher.dispatch(request, self.resolver)
        self.resolver.assert_not_called()

    def test_wrong_target_kind(self):
        request = BulkActionRequest(
            action=BulkAction.APPROVE_VERIFICATION,
            target_ids=(('vendor', '1'), ('listing', '2')),
            reason='ok',
        )

        with self.assertRaises(ValidationError):
            self.dispatcher.dispatch(request, self.resolver)
        self.resolver.assert_not_called()

    def test_plain_ids_need_a_kind_for_verification(self):
        request = BulkActionRequest(action=BulkAction.APPROVE_VERIFICATION, target_ids=('1',), reason='ok')

        with self.assertRaises(ValidationError):
            self.dispatcher.dispatch(request, self.resolver)

        request = BulkActionRequest(
            action=BulkAction.APPROVE_VERIFICATION, target_ids=('1',), entity_type_filter='restaurant', reason='ok'
        )
        result = self.dispatcher.dispatch(request, self.resolver)
        self.assertEqual(result.succeeded_targets, [('restaurant', '1')])

    def test_entity_type_filter_skips_other_kinds(self):
        request = BulkActionRequest(
            action=BulkAction.REJECT_VERIFICATION,
            target_ids=({'kind': 'vendor', 'id': '1'}, {'kind': 'restaurant', 'id': '1'}, ('vendor', '2')),
            entity_type_filter='vendor',
            reason='Incomplete documents',
        )
        result = self.dispatcher.dispatch(request, self.resolver)

        self.assertEqual(result.succeeded_targets, [('vendor', '1'), ('vendor', '2')])
        self.assertEqual(result.skipped[0]['kind'], 'restaurant')
        self.assertEqual(self.resolver.call_count, 2)

    def test_entity_type_filter_must_match_action(self):
        request = BulkActionRequest(
            action=BulkAction.TOGGLE_FEATURED, target_ids=('1',), entity_type_filter='vendor'
        )

        with self.assertRaises(ValidationError) as ctx:
            self.dispatcher.dispatch(request, self.resolver)
        self.assertIn('entity_type_filter', ctx.exception.message_dict)


class VerificationResolverTestCase(SimpleTestCase):

    def setUp(self):
        self.update = mock.Mock()
        self.reset = mock.Mock()
        self.resolve = verification_resolver(self.update, self.reset)

    def test_routes_actions(self):
        self.resolve('vendor', '1', 'approve_verification', {'reason': 'ok'})
        self.resolve('restaurant', '2', 'reject_verification', {'reason': 'no'})
        self.resolve('vendor', '3', 'reset_verification', {'reason': 'again'})

        self.update.assert_has_calls([
            mock.call('vendor', '1', {'status': 'approved', 'reason': 'ok'}),
            mock.call('restaurant', '2', {'status': 'rejected', 'reason': 'no'}),
        ])
        self.reset.assert_called_once_with('vendor', '3', 'again')

    def test_non_verification_action(self):
        with self.assertRaises(ValidationError):
            self.resolve('vendor', '1', 'toggle_featured', {'reason': ''})
