"""Бэкенд для Native S3 API (boto3)"""

import os
from contextlib import closing
import boto3
from botocore.exceptions import ClientError
from .base import StorageBackend, CHUNK_SIZE
from .filesystem import BUFFER, write_chunks

MISSING_BUCKET_CODES = {"NoSuchBucket", "404", "NotFound"}
MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}
SCRATCH_NAME = "s3tmp"


def error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def drain(body) -> int:
    """Чтение тела ответа блоками по 1 KB"""
    total = 0
    while True:
        chunk = body.read(CHUNK_SIZE)
        total += len(chunk)
        if len(chunk) < CHUNK_SIZE:
            break
    return total


class S3Backend(StorageBackend):
    """Бэкенд для бакета S3 (AWS, MinIO)"""

    name = "native_s3"

    def __init__(self, bucket: str, region: str = "ap-northeast-2",
                 access_key: str = None, secret_key: str = None,
                 endpoint_url: str = None, payload_kib: int = 100,
                 tmp_dir: str = "/tmp", client=None):
        super().__init__(payload_kib)
        self.bucket = bucket
        self.region = region
        self.access_key = access_key
        self.secret_key = secret_key
        self.endpoint_url = endpoint_url
        self.scratch_file = os.path.join(tmp_dir, SCRATCH_NAME)
        self._client = client

    @property
    def client(self):
        """S3 клиент создается лениво, в том числе после передачи в другой процесс"""
        if self._client is None:
            self._client = boto3.client(
                's3',
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self.access_key or os.getenv('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=self.secret_key or os.getenv('AWS_SECRET_ACCESS_KEY')
            )
        return self._client

    def __getstate__(self):
        state = self.__dict__.copy()
        state["_client"] = None
        return state

    def setup(self):
        """Файл с полезной нагрузкой и пустой бакет"""
        write_chunks(self.scratch_file, self.payload_kib)
        self.purge()
        self.create_bucket()

    def teardown(self):
        try:
            self.purge()
        except ClientError as e:
            print(f"  Cleanup warning: {e}")
        try:
            os.remove(self.scratch_file)
        except FileNotFoundError:
            pass

    def purge(self):
        """Удаление всех объектов и самого бакета"""
        try:
            token = None
            while True:
                kwargs = {"Bucket": self.bucket}
                if token:
                    kwargs["ContinuationToken"] = token
                response = self.client.list_objects_v2(**kwargs)
                for obj in response.get("Contents", []):
                    self.client.delete_object(Bucket=self.bucket, Key=obj["Key"])
                if not response.get("IsTruncated"):
                    break
                token = response.get("NextContinuationToken")
            self.client.delete_bucket(Bucket=self.bucket)
        except ClientError as e:
            # При первом запуске бакета еще нет
            if error_code(e) not in MISSING_BUCKET_CODES:
                raise

    def create_bucket(self):
        kwargs = {"Bucket": self.bucket}
        if self.region and self.region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        try:
            self.client.create_bucket(**kwargs)
        except ClientError as e:
            if error_code(e) != "BucketAlreadyOwnedByYou":
                raise

    def _head(self, path: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=path)
        except ClientError as e:
            if error_code(e) in MISSING_KEY_CODES:
                return False
            raise
        return True

    def _get(self, path: str):
        response = self.client.get_object(Bucket=self.bucket, Key=path)
        with closing(response['Body']) as body:
            drain(body)

    def _put(self, path: str):
        with open(self.scratch_file, 'rb') as f:
            self.client.put_object(Bucket=self.bucket, Key=path, Body=f)

    def _write(self, path: str, size_kib: int):
        self.client.put_object(Bucket=self.bucket, Key=path, Body=BUFFER * size_kib)

    def _read(self, path: str):
        response = self.client.get_object(Bucket=self.bucket, Key=path)
        with closing(response['Body']) as body:
            drain(body)
