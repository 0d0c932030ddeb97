import unittest
from flickr_client.engine import has_changed, list_difference, map_set_collections, map_set_photos
from flickr_client.models import WatchedItem

def watch_map(**times):
    return {k: WatchedItem(last_update=v) for k, v in times.items()}

class TestHasChanged(unittest.TestCase):
    def setUp(self):
        self.original = watch_map(one=15, two=20)

    def test_same_map(self):
        self.assertFalse(has_changed(self.original, self.original))
        self.assertFalse(has_changed(self.original, watch_map(one=15, two=20)))

    def test_newer_update(self):
        self.assertTrue(has_changed(self.original, watch_map(one=15, two=21)))
        self.assertTrue(has_changed(watch_map(x=10), watch_map(x=20)))

    def test_older_update_is_not_change(self):
        self.assertFalse(has_changed(watch_map(x=10), watch_map(x=5)))

    def test_zero_time_is_never_stale(self):
        self.assertFalse(has_changed(watch_map(x=0), watch_map(x=100)))

    def test_added_or_removed(self):
        self.assertTrue(has_changed(self.original, watch_map(one=15)))
        self.assertTrue(has_changed(self.original, watch_map(one=15, two=20, three=30)))
        self.assertTrue(has_changed(watch_map(x=0), {}))

    def test_replaced_key(self):
        self.assertTrue(has_changed(self.original, watch_map(one=15, three=20)))

class TestMapSetPhotos(unittest.TestCase):
    def test_parses_update_times(self):
        photos = [
            {"id": "8459503474", "lastupdate": "1451765167"},
            {"id": "8458410907", "lastupdate": 1451765387},
            {"id": "1"},
        ]
        m = map_set_photos(photos)
        self.assertEqual(m["8459503474"].last_update, 1451765167)
        self.assertEqual(m["8458410907"].last_update, 1451765387)
        self.assertEqual(m["1"].last_update, 0)

class TestMapSetCollections(unittest.TestCase):
    def test_nested_collections(self):
        tree = [{
            "id": "B",
            "collection": [{"id": "A", "set": [{"id": "S"}]}],
        }]
        sets = map_set_collections(tree)
        self.assertEqual(set(sets["S"]), {"A", "B"})
        # immediate parent first
        self.assertEqual(sets["S"], ["A", "B"])

    def test_set_in_several_branches(self):
        tree = [
            {"id": "root1", "collection": [{"id": "A", "set": [{"id": "S"}, {"id": "T"}]}]},
            {"id": "root2", "set": [{"id": "S"}]},
            {"id": "empty"},
        ]
        sets = map_set_collections(tree)
        self.assertEqual(set(sets["S"]), {"A", "root1", "root2"})
        self.assertEqual(set(sets["T"]), {"A", "root1"})
        self.assertEqual(len(sets), 2)

    def test_does_not_mutate_accumulator(self):
        existing = {"S": ["X"]}
        sets = map_set_collections([{"id": "A", "set": [{"id": "S"}]}], existing)
        self.assertEqual(existing, {"S": ["X"]})
        self.assertEqual(set(sets["S"]), {"X", "A"})

    def test_empty_tree(self):
        self.assertEqual(map_set_collections([]), {})

class TestListDifference(unittest.TestCase):
    def test_ignores_order(self):
        self.assertEqual(list_difference(["a", "b"], ["b", "a"]), [])
        self.assertEqual(set(list_difference(["a", "b"], ["b", "c"])), {"a", "c"})

if __name__ == '__main__':
    unittest.main()
