import io
import threading
import pytest
from botocore.exceptions import ClientError

from storagebench import FilesystemBackend, S3Backend, StorageBackend


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class MemoryBackend(StorageBackend):
    """Thread-safe in-memory backend for executor tests."""

    name = "memory"

    def __init__(self, payload_kib: int = 1):
        super().__init__(payload_kib)
        self.objects = {}
        self.lock = threading.Lock()

    def setup(self):
        with self.lock:
            self.objects.clear()

    def teardown(self):
        with self.lock:
            self.objects.clear()

    def _head(self, path):
        with self.lock:
            return path in self.objects

    def _get(self, path):
        with self.lock:
            return bytes(self.objects[path])

    def _put(self, path):
        with self.lock:
            self.objects[path] = bytes(self.payload_kib * 1024)

    def _write(self, path, size_kib):
        with self.lock:
            self.objects[path] = bytes(size_kib * 1024)

    def _read(self, path):
        with self.lock:
            return bytes(self.objects[path])


class FakeS3Client:
    """Minimal stand-in for a boto3 S3 client."""

    def __init__(self, page_size: int = 1000):
        self.buckets = {}
        self.page_size = page_size
        self.calls = []
        self.lock = threading.Lock()

    def _bucket(self, name, operation):
        if name not in self.buckets:
            raise client_error("NoSuchBucket", operation)
        return self.buckets[name]

    def create_bucket(self, Bucket, CreateBucketConfiguration=None):
        self.calls.append(("create_bucket", Bucket, CreateBucketConfiguration))
        if Bucket in self.buckets:
            raise client_error("BucketAlreadyOwnedByYou", "CreateBucket")
        self.buckets[Bucket] = {}

    def delete_bucket(self, Bucket):
        self.calls.append(("delete_bucket", Bucket))
        bucket = self._bucket(Bucket, "DeleteBucket")
        if bucket:
            raise client_error("BucketNotEmpty", "DeleteBucket")
        del self.buckets[Bucket]

    def list_objects_v2(self, Bucket, ContinuationToken=None):
        self.calls.append(("list_objects_v2", Bucket))
        # токен - последний отданный ключ, как курсор в S3
        keys = sorted(k for k in self._bucket(Bucket, "ListObjectsV2")
                      if ContinuationToken is None or k > ContinuationToken)
        page = keys[:self.page_size]
        response = {"KeyCount": len(page), "IsTruncated": len(keys) > self.page_size}
        if page:
            response["Contents"] = [{"Key": key} for key in page]
        if response["IsTruncated"]:
            response["NextContinuationToken"] = page[-1]
        return response

    def delete_object(self, Bucket, Key):
        self._bucket(Bucket, "DeleteObject").pop(Key, None)

    def head_object(self, Bucket, Key):
        with self.lock:
            bucket = self._bucket(Bucket, "HeadObject")
            if Key not in bucket:
                raise client_error("404", "HeadObject")
            return {"ContentLength": len(bucket[Key])}

    def get_object(self, Bucket, Key):
        with self.lock:
            bucket = self._bucket(Bucket, "GetObject")
            if Key not in bucket:
                raise client_error("NoSuchKey", "GetObject")
            return {"Body": io.BytesIO(bucket[Key])}

    def put_object(self, Bucket, Key, Body):
        data = Body if isinstance(Body, bytes) else Body.read()
        with self.lock:
            self._bucket(Bucket, "PutObject")[Key] = data


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def fs_backend(tmp_path):
    backend = FilesystemBackend(str(tmp_path / "dest"), payload_kib=2)
    backend.setup()
    return backend


@pytest.fixture
def fake_s3():
    return FakeS3Client(page_size=3)


@pytest.fixture
def s3_backend(fake_s3, tmp_path):
    return S3Backend("bench", region="ap-northeast-2", payload_kib=2,
                     tmp_dir=str(tmp_path), client=fake_s3)


@pytest.fixture
def no_cache_drop(monkeypatch):
    calls = []

    def fake_drop():
        calls.append(1)
        return False

    monkeypatch.setattr("storagebench.runner.drop_caches", fake_drop)
    return calls
