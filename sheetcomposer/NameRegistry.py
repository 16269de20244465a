# NameRegistry - display names for scene nodes
#
# Names look like "Text_3": the kind's base name and a per-kind
# ordinal.  Ordinals only ever grow within a document, so a deleted
# node's name is never handed out again.  The registry is owned by a
# Document and reset only when a new document is started.

from collections import defaultdict


class NameRegistry:
    def __init__(self):
        self._names = {}
        self._counters = defaultdict(int)

    def display_name(self, node):
        """Return the node's name, assigning one on first request."""
        name = self._names.get(node.id)
        if name is None:
            self._counters[node.kind] += 1
            name = f"{node.kind.base_name}_{self._counters[node.kind]}"
            self._names[node.id] = name
        return name

    def forget(self, node_id):
        """Drop a deleted node's name; its ordinal stays consumed."""
        self._names.pop(node_id, None)

    def reset(self):
        self._names.clear()
        self._counters.clear()
