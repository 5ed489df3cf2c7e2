"""Immutable editor state and the transaction application pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from .document_model import Mark, Node, StepApplyError
from .selection import Selection
from .transaction import Transaction

__all__ = ["APPENDED_TRANSACTION", "EditorState", "Plugin"]

LOGGER = logging.getLogger(__name__)
APPENDED_TRANSACTION = "appended_transaction"


class Plugin(Protocol):
    """Hook invoked after a batch of transactions is applied.

    ``append_transaction`` may return an extra transaction built on
    ``new_state``; it is applied before the batch becomes visible.
    """

    key: str

    def append_transaction(
        self,
        transactions: Sequence[Transaction],
        old_state: EditorState,
        new_state: EditorState,
    ) -> Transaction | None:
        ...


@dataclass(slots=True)
class _Seen:
    state: EditorState
    count: int


@dataclass(slots=True, frozen=True)
class EditorState:
    """Snapshot of the document plus selection, stored marks and plugins."""

    doc: Node
    selection: Selection = field(default_factory=Selection)
    stored_marks: tuple[Mark, ...] | None = None
    plugins: tuple[Plugin, ...] = ()

    @property
    def tr(self) -> Transaction:
        """Start a new transaction on top of this state."""

        return Transaction(self)

    def reconfigure(self, plugins: Sequence[Plugin]) -> EditorState:
        return EditorState(self.doc, self.selection, self.stored_marks, tuple(plugins))

    def apply(self, tr: Transaction) -> EditorState:
        return self.apply_transaction(tr)[0]

    def apply_transaction(self, root_tr: Transaction) -> tuple[EditorState, list[Transaction]]:
        """Apply ``root_tr`` and every transaction plugins append in response.

        Each plugin only sees the transactions it has not been shown yet;
        the loop ends once a full round appends nothing.
        """

        transactions = [root_tr]
        new_state = self._apply_inner(root_tr)
        seen: list[_Seen] | None = None
        while True:
            have_new = False
            for index, plugin in enumerate(self.plugins):
                count = seen[index].count if seen else 0
                old_state = seen[index].state if seen else self
                appended = None
                if count < len(transactions):
                    appended = plugin.append_transaction(transactions[count:], old_state, new_state)
                if appended is not None:
                    appended.set_meta(APPENDED_TRANSACTION, root_tr)
                    if seen is None:
                        seen = [
                            _Seen(new_state, len(transactions)) if other < index else _Seen(self, 0)
                            for other in range(len(self.plugins))
                        ]
                    transactions.append(appended)
                    new_state = new_state._apply_inner(appended)
                    have_new = True
                    LOGGER.debug("Plugin %s appended a transaction with %d step(s)", plugin.key, len(appended.steps))
                if seen is not None:
                    seen[index] = _Seen(new_state, len(transactions))
            if not have_new:
                return new_state, transactions

    def _apply_inner(self, tr: Transaction) -> EditorState:
        if tr.before is not self.doc:
            raise StepApplyError("Transaction was not created from this state", reason="stale_transaction")
        size = tr.doc.content_size
        return EditorState(tr.doc, tr.selection.clamp(size), tr.stored_marks, self.plugins)
