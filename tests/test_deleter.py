import unittest

from fake_s3 import FakeS3Client
from s3_file_sink.errors import BatchDeleteError, NoMatchingFilesError, PathNotAllowedError
from s3_file_sink.services import S3FileSink


def make_sink(client, **kwargs):
    return S3FileSink("bucket-one", "root/", client=client, **kwargs)


def many_objects(count):
    return {f"root/bulk/item-{index:05d}": b"x" for index in range(count)}


class RmTests(unittest.IsolatedAsyncioTestCase):
    async def test_recursive_delete_removes_everything_below(self):
        client = FakeS3Client({"root/a/b.txt": b"1", "root/a/sub/c.txt": b"2", "root/keep.txt": b"3"})
        sink = make_sink(client)

        results = await sink.rm("a")

        self.assertEqual(["root/keep.txt"], client.keys())
        self.assertEqual(1, len(results))
        self.assertEqual([("bucket-one", ["root/a/b.txt", "root/a/sub/c.txt"])], client.delete_objects_calls)
        self.assertNotIn("Delimiter", client.list_objects_kwargs[0])

    async def test_large_delete_is_split_into_batches(self):
        client = FakeS3Client(many_objects(2500))
        sink = make_sink(client)

        results = await sink.rm("bulk/")

        self.assertEqual(3, len(results))
        self.assertEqual([1000, 1000, 500], [len(keys) for _, keys in client.delete_objects_calls])
        self.assertEqual([], client.keys())
        self.assertEqual(3, len(client.list_objects_kwargs))

    async def test_failed_batch_stops_remaining_batches(self):
        failure = {"Deleted": [], "Errors": [{"Key": "root/bulk/item-01000", "Message": "Access Denied"}]}
        client = FakeS3Client(many_objects(2500), delete_overrides={1: failure})
        sink = make_sink(client)

        with self.assertRaises(BatchDeleteError) as ctx:
            await sink.rm("bulk")

        self.assertIs(failure, ctx.exception.response)
        self.assertEqual(1, len(ctx.exception.results))
        self.assertIn("Access Denied", str(ctx.exception))
        self.assertEqual(2, len(client.delete_objects_calls))
        self.assertEqual(1500, len(client.keys()))

    async def test_batch_without_deleted_entry_fails(self):
        client = FakeS3Client({"root/a.txt": b"a"}, delete_overrides={0: {}})
        sink = make_sink(client)

        with self.assertRaises(BatchDeleteError) as ctx:
            await sink.rm("a.txt")

        self.assertEqual({}, ctx.exception.response)
        self.assertEqual([], ctx.exception.results)

    async def test_recursive_delete_without_matches_fails(self):
        client = FakeS3Client({"root/other.txt": b"a"})
        sink = make_sink(client)

        with self.assertRaises(NoMatchingFilesError):
            await sink.rm("missing")

        self.assertEqual([], client.delete_objects_calls)

    async def test_non_recursive_delete_targets_single_key(self):
        client = FakeS3Client({"root/a.txt": b"a", "root/a.txt.bak": b"b"})
        sink = make_sink(client)

        await sink.rm("a.txt", recursive=False)

        self.assertEqual([], client.list_objects_kwargs)
        self.assertEqual([("bucket-one", ["root/a.txt"])], client.delete_objects_calls)
        self.assertEqual(["root/a.txt.bak"], client.keys())

    async def test_non_recursive_delete_of_missing_key_succeeds(self):
        client = FakeS3Client()
        sink = make_sink(client)

        results = await sink.rm("ghost.txt", recursive=False)

        self.assertEqual([{"Deleted": [{"Key": "root/ghost.txt"}]}], results)

    async def test_configured_batch_size(self):
        client = FakeS3Client({f"root/d/{index}": b"x" for index in range(5)})
        sink = make_sink(client, delete_batch_size=2)

        await sink.rm("d/")

        self.assertEqual([2, 2, 1], [len(keys) for _, keys in client.delete_objects_calls])

    async def test_rejects_parent_reference_without_backend_call(self):
        client = FakeS3Client({"root/a.txt": b"a"})
        sink = make_sink(client)

        with self.assertRaises(PathNotAllowedError):
            await sink.rm("../a.txt")

        self.assertEqual(0, client.call_count)


if __name__ == "__main__":
    unittest.main()
