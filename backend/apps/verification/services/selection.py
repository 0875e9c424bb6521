"""
Selection set for bulk actions.

An immutable set of (kind, id) pairs with pure transitions: every operation
returns a new SelectionSet and leaves the original untouched. Insertion order
is preserved because it becomes the dispatch order of the next bulk action.

The selection knows nothing about paging. Callers reset it themselves when
the visible queue changes (filter or page change, successful dispatch,
explicit cancel).
"""
from dataclasses import dataclass
from typing import Any, Iterable, Tuple

from django.core.exceptions import ValidationError

from apps.verification.constants import EntityKind, VERIFICATION_KINDS

CHECKED = 'checked'
INDETERMINATE = 'indeterminate'
UNCHECKED = 'unchecked'

# Independent queues never share a selection
QUEUE_KINDS = {
    'approvals': tuple(VERIFICATION_KINDS),
    'listings': (EntityKind.LISTING.value,),
    'categories': (EntityKind.CATEGORY.value,),
}


def selection_key(item: Any) -> Tuple[str, str]:
    """Extract the (kind, id) pair from an application, mapping or pair."""
    if isinstance(item, (tuple, list)) and len(item) == 2:
        kind, entity_id = item
    elif isinstance(item, dict):
        kind, entity_id = item.get('kind'), item.get('id')
    else:
        kind, entity_id = getattr(item, 'kind', None), getattr(item, 'id', None)
    return str(kind), str(entity_id)


@dataclass(frozen=True)
class SelectionSet:
    kinds: Tuple[str, ...] = tuple(VERIFICATION_KINDS)
    members: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def for_queue(cls, queue: str, members: Iterable = ()):
        if queue not in QUEUE_KINDS:
            raise ValidationError({'queue': f"Unknown selection queue '{queue}'"})
        selection = cls(kinds=QUEUE_KINDS[queue])
        return selection._replace_members(members)

    def _check_kind(self, kind):
        if kind not in self.kinds:
            raise ValidationError(
                {'kind': f"'{kind}' cannot be selected here (expected one of {', '.join(self.kinds)})"}
            )

    def _replace_members(self, items):
        members = []
        for item in items:
            key = selection_key(item)
            self._check_kind(key[0])
            if key not in members:
                members.append(key)
        return SelectionSet(kinds=self.kinds, members=tuple(members))

    def __contains__(self, item):
        return selection_key(item) in self.members

    def __len__(self):
        return len(self.members)

    def __iter__(self):
        return iter(self.members)

    def toggle(self, kind, entity_id) -> 'SelectionSet':
        """Add the pair if absent, remove it if present."""
        key = (str(kind), str(entity_id))
        self._check_kind(key[0])
        if key in self.members:
            members = tuple(member for member in self.members if member != key)
        else:
            members = self.members + (key,)
        return SelectionSet(kinds=self.kinds, members=members)

    def select_all(self, items: Iterable) -> 'SelectionSet':
        """Replace the selection with exactly the given visible items."""
        return self._replace_members(items)

    def clear(self) -> 'SelectionSet':
        return SelectionSet(kinds=self.kinds)

    def count_by_kind(self):
        counts = {kind: 0 for kind in self.kinds}
        for kind, _ in self.members:
            counts[kind] += 1
        return counts

    def ids(self, kind=None):
        return [entity_id for member_kind, entity_id in self.members
                if kind is None or member_kind == kind]

    def is_all_selected(self, items: Iterable) -> bool:
        keys = [selection_key(item) for item in items]
        return bool(keys) and all(key in self.members for key in keys)

    def is_partially_selected(self, items: Iterable) -> bool:
        keys = [selection_key(item) for item in items]
        selected = sum(1 for key in keys if key in self.members)
        return 0 < selected < len(keys)

    def checkbox_state(self, items: Iterable) -> str:
        """Header checkbox state for the visible items."""
        items = list(items)
        if self.is_all_selected(items):
            return CHECKED
        if self.is_partially_selected(items):
            return INDETERMINATE
        return UNCHECKED

    def to_dict(self):
        return {
            'members': [{'kind': kind, 'id': entity_id} for kind, entity_id in self.members],
            'count': len(self.members),
            'count_by_kind': self.count_by_kind(),
        }


class SessionSelectionStore:
    """Keeps one SelectionSet per queue in the Django session."""

    SESSION_KEY = 'bulk_selection'

    def __init__(self, session):
        self.session = session

    def load(self, queue: str) -> SelectionSet:
        stored = self.session.get(self.SESSION_KEY, {}).get(queue, [])
        return SelectionSet.for_queue(queue, [tuple(member) for member in stored])

    def save(self, queue: str, selection: SelectionSet) -> SelectionSet:
        stored = dict(self.session.get(self.SESSION_KEY, {}))
        stored[queue] = [list(member) for member in selection.members]
        self.session[self.SESSION_KEY] = stored
        return selection
