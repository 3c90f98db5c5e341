import io
import os
import pickle
import pytest
from botocore.exceptions import ClientError

from conftest import FakeS3Client, client_error
from storagebench.executor import ParallelExecutor, Strategy, mixed_step
from storagebench.native_s3 import S3Backend
from storagebench.workloads import generate_workload


def test_setup_creates_bucket_when_missing(s3_backend, fake_s3):
    s3_backend.setup()

    assert "bench" in fake_s3.buckets
    assert ("create_bucket", "bench", {"LocationConstraint": "ap-northeast-2"}) in fake_s3.calls
    assert os.path.getsize(s3_backend.scratch_file) == 2 * 1024


def test_setup_purges_existing_objects(s3_backend, fake_s3):
    fake_s3.buckets["bench"] = {f"old/{i}": b"x" for i in range(7)}
    s3_backend.setup()
    assert fake_s3.buckets["bench"] == {}


def test_us_east_1_has_no_location_constraint(fake_s3, tmp_path):
    backend = S3Backend("bench", region="us-east-1", tmp_dir=str(tmp_path), client=fake_s3)
    backend.create_bucket()
    assert ("create_bucket", "bench", None) in fake_s3.calls


def test_teardown_removes_bucket_and_scratch(s3_backend, fake_s3):
    with s3_backend.session():
        s3_backend.put("dirs/00/00/00/00/01/tmp")
    assert "bench" not in fake_s3.buckets
    assert not os.path.exists(s3_backend.scratch_file)


def test_purge_reraises_unexpected_errors(s3_backend):
    class DeniedClient(FakeS3Client):
        def list_objects_v2(self, **kwargs):
            raise client_error("AccessDenied", "ListObjectsV2")

    s3_backend._client = DeniedClient()
    with pytest.raises(ClientError):
        s3_backend.purge()


def test_head_get_put(s3_backend, fake_s3):
    s3_backend.setup()
    path = "dirs/00/00/00/00/07/tmp"

    assert not s3_backend.head(path).succeeded
    assert not s3_backend.get(path).succeeded
    assert s3_backend.put(path).succeeded
    assert len(fake_s3.buckets["bench"][path]) == 2 * 1024
    assert s3_backend.head(path).succeeded
    assert s3_backend.get(path).succeeded


def test_head_failure_other_than_missing_is_soft(s3_backend):
    class FlakyClient(FakeS3Client):
        def head_object(self, Bucket, Key):
            raise client_error("SlowDown", "HeadObject")

    s3_backend._client = FlakyClient()
    result = s3_backend.head("any")
    assert result.kind == "head"
    assert not result.succeeded


def test_write_and_read(s3_backend, fake_s3):
    s3_backend.setup()
    assert s3_backend.write("tmp.10240.0", 10).succeeded
    assert len(fake_s3.buckets["bench"]["tmp.10240.0"]) == 10 * 1024
    assert s3_backend.read("tmp.10240.0").succeeded
    assert not s3_backend.read("tmp.missing").succeeded


def test_mixed_workload_over_threads(s3_backend, fake_s3):
    s3_backend.setup()
    sequence = generate_workload(40, 3)
    stats = ParallelExecutor(4, Strategy.THREAD).run(sequence, mixed_step, s3_backend)

    assert stats.count("head") == 160
    assert stats.count("get") + stats.count("put") == 160
    assert len(fake_s3.buckets["bench"]) == 40


def test_pickling_drops_client(s3_backend):
    clone = pickle.loads(pickle.dumps(s3_backend))
    assert clone._client is None
    assert clone.bucket == "bench"
    assert clone.scratch_file == s3_backend.scratch_file


class TrackedBody(io.BytesIO):
    def __init__(self, data, fail=False):
        super().__init__(data)
        self.fail = fail

    def read(self, size=-1):
        if self.fail:
            raise ConnectionError("connection reset")
        return super().read(size)


def test_response_body_is_closed(s3_backend):
    bodies = []

    class TrackingClient(FakeS3Client):
        def get_object(self, Bucket, Key):
            body = TrackedBody(b"x" * 3000, fail=Key.endswith("broken"))
            bodies.append(body)
            return {"Body": body}

    s3_backend._client = TrackingClient()
    assert s3_backend.get("dirs/ok").succeeded
    assert not s3_backend.read("dirs/broken").succeeded
    assert all(body.closed for body in bodies)
    assert len(bodies) == 2
