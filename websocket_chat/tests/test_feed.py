from types import SimpleNamespace

from django.test import SimpleTestCase

from websocket_chat.feed import INSERT, UPDATE, ChangeFeed


class ChangeFeedTest(SimpleTestCase):
    def setUp(self):
        self.feed = ChangeFeed()
        self.seen = []

    def test_filters_and_event_types(self):
        self.feed.subscribe('rows', self.seen.append, filters={'group_id': 1}, events=[INSERT])

        self.feed.publish('rows', INSERT, SimpleNamespace(group_id=1, name='a'))
        self.feed.publish('rows', INSERT, SimpleNamespace(group_id=2, name='b'))
        self.feed.publish('rows', UPDATE, SimpleNamespace(group_id=1, name='c'))
        self.feed.publish('other', INSERT, SimpleNamespace(group_id=1, name='d'))

        self.assertEqual([e.record.name for e in self.seen], ['a'])

    def test_filter_matches_string_and_int_ids(self):
        self.feed.subscribe('rows', self.seen.append, filters={'group_id': '5'})
        self.feed.publish('rows', INSERT, SimpleNamespace(group_id=5))
        self.assertEqual(len(self.seen), 1)

    def test_cancel_is_idempotent(self):
        subscription = self.feed.subscribe('rows', self.seen.append)
        subscription.cancel()
        subscription.cancel()

        self.feed.publish('rows', INSERT, SimpleNamespace())

        self.assertEqual(self.seen, [])
        self.assertEqual(self.feed.subscriber_count('rows'), 0)

    def test_context_manager_cancels(self):
        with self.feed.subscribe('rows', self.seen.append):
            self.feed.publish('rows', INSERT, SimpleNamespace())
        self.feed.publish('rows', INSERT, SimpleNamespace())
        self.assertEqual(len(self.seen), 1)

    def test_failing_handler_does_not_starve_others(self):
        def explode(event):
            raise ValueError("broken subscriber")

        self.feed.subscribe('rows', explode)
        self.feed.subscribe('rows', self.seen.append)

        with self.assertLogs('websocket_chat.feed', level='ERROR'):
            self.feed.publish('rows', INSERT, SimpleNamespace())

        self.assertEqual(len(self.seen), 1)

    def test_cancel_from_inside_handler(self):
        """A subscription cancelled by an earlier handler receives nothing more"""
        second = None

        def cancel_second(event):
            second.cancel()

        self.feed.subscribe('rows', cancel_second)
        second = self.feed.subscribe('rows', self.seen.append)

        self.feed.publish('rows', INSERT, SimpleNamespace())

        self.assertEqual(self.seen, [])
