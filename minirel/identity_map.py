class IdentityMap:
    """One instance per (root kind, identifier)."""

    def __init__(self):
        self._map = {}

    def get(self, kind, identifier):
        return self._map.get((kind, identifier))

    def add(self, kind, identifier, entity):
        self._map[(kind, identifier)] = entity

    def remove(self, kind, identifier):
        self._map.pop((kind, identifier), None)

    def of_kind(self, kind):
        return [entity for (k, _), entity in self._map.items() if k is kind]

    def clear(self):
        self._map.clear()

    def __len__(self):
        return len(self._map)
