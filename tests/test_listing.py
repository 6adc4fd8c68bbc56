import unittest

from botocore.exceptions import ClientError

from fake_s3 import FakeS3Client
from s3_file_sink.listing import ListingAggregator


def _client_with_keys(count, prefix="root/logs/"):
    return FakeS3Client({f"{prefix}file-{index}.txt": b"x" * index for index in range(count)})


class ListingAggregatorTests(unittest.IsolatedAsyncioTestCase):
    async def test_list_all_follows_continuation_tokens(self):
        client = _client_with_keys(5)
        listing = ListingAggregator(client, "bucket-one", page_size=2)

        merged = await listing.list_all("root/")

        self.assertEqual(client.keys(), [entry.key for entry in merged.entries])
        self.assertEqual(3, len(client.list_objects_kwargs))
        self.assertNotIn("ContinuationToken", client.list_objects_kwargs[0])
        self.assertEqual(["2", "4"], [call["ContinuationToken"] for call in client.list_objects_kwargs[1:]])
        for call in client.list_objects_kwargs:
            self.assertEqual("bucket-one", call["Bucket"])
            self.assertEqual("root/", call["Prefix"])
            self.assertNotIn("Delimiter", call)

    async def test_delimiter_groups_common_prefixes(self):
        client = FakeS3Client({"root/a.txt": b"a", "root/sub/b.txt": b"b", "root/sub/c.txt": b"c"})
        listing = ListingAggregator(client, "bucket-one")

        page = await listing.fetch_page("root/", "/")

        self.assertEqual(["root/a.txt"], [entry.key for entry in page.entries])
        self.assertEqual(["root/sub/"], page.common_prefixes)
        self.assertEqual("/", client.list_objects_kwargs[0]["Delimiter"])
        self.assertFalse(page.has_more)

    async def test_iter_pages_reuses_first_page(self):
        client = _client_with_keys(3)
        listing = ListingAggregator(client, "bucket-one", page_size=2)
        first = await listing.fetch_page("root/")

        pages = [page async for page in listing.iter_pages("root/", first_page=first)]

        self.assertIs(first, pages[0])
        self.assertEqual(2, len(pages))
        self.assertEqual(2, len(client.list_objects_kwargs))

    async def test_iter_entries_preserves_page_order(self):
        client = _client_with_keys(4)
        listing = ListingAggregator(client, "bucket-one", page_size=3)

        keys = [entry.key async for entry in listing.iter_entries("root/logs/")]

        self.assertEqual(client.keys(), keys)

    async def test_page_size_is_clamped(self):
        client = _client_with_keys(1)

        await ListingAggregator(client, "bucket-one", page_size=5000).fetch_page("root/")
        await ListingAggregator(client, "bucket-one", page_size=0).fetch_page("root/")

        self.assertEqual([1000, 1], [call["MaxKeys"] for call in client.list_objects_kwargs])

    async def test_backend_errors_propagate(self):
        error = ClientError({"Error": {"Code": "AccessDenied", "Message": "Denied"}}, "ListObjectsV2")
        client = FakeS3Client({"root/a.txt": b"a"}, list_errors={0: error})
        listing = ListingAggregator(client, "bucket-one")

        with self.assertRaises(ClientError) as ctx:
            await listing.list_all("root/")

        self.assertIs(error, ctx.exception)


if __name__ == "__main__":
    unittest.main()
