"""
Test suite for OSS request signing functionality

This module tests the signing utilities, canonical string construction and
the HMAC-SHA1 signer.
"""

import base64
import hashlib

import pytest

from ossign.exceptions import RequestConstructionError, ValidationError
from ossign.signing import (
    # Core signing
    OssSigner,
    create_signer,
    sign_request,
    # Types
    OssRequest,
    Credentials,
    KeyOnly,
    KeyValue,
    make_sub_resource,
    SigningError,
    SigningErrorCodes,
    HttpMethod,
    # Canonicalization
    build_canonical_message,
    build_string_to_sign,
    canonicalize_oss_headers,
    canonicalize_resource,
    # Utilities
    calculate_content_md5,
    guess_content_type,
    format_http_date,
    find_header,
    is_oss_header,
)

ACCESS_KEY_ID = "44CF9590006BF252F707"
ACCESS_KEY_SECRET = "OtxrzxIsfpFjA7SwPzILwy8Bw21TLhquhboDYROV"
FIXED_DATE = "Mon, 21 Oct 2024 07:28:00 GMT"


def make_request(**overrides) -> OssRequest:
    fields = {
        "verb": "PUT",
        "host": "bucket.oss-cn-hangzhou.aliyuncs.com",
        "path": "/key.txt",
        "resource": "/bucket/key.txt",
        "body": b"hello",
        "headers": {
            "Content-Type": "text/plain",
            "Content-MD5": "XUFAKrxLKna5cZ2REBfFkg==",
            "Date": FIXED_DATE,
        },
    }
    fields.update(overrides)
    return OssRequest(**fields)


class TestSigningUtilities:
    """Test utility functions"""

    def test_content_md5_empty_body(self):
        """Empty bodies have an empty Content-MD5"""
        assert calculate_content_md5(b"") == ""
        assert calculate_content_md5("") == ""
        assert calculate_content_md5(None) == ""

    def test_content_md5_matches_base64_md5(self):
        """Non-empty bodies use base64(MD5(body))"""
        assert calculate_content_md5(b"hello") == "XUFAKrxLKna5cZ2REBfFkg=="
        assert calculate_content_md5("hello") == "XUFAKrxLKna5cZ2REBfFkg=="

        body = bytes(range(256)) * 4
        expected = base64.b64encode(hashlib.md5(body).digest()).decode("ascii")
        assert calculate_content_md5(body) == expected

    def test_content_md5_is_stable(self):
        assert calculate_content_md5(b"payload") == calculate_content_md5(b"payload")

    def test_content_md5_rejects_other_types(self):
        with pytest.raises(SigningError):
            calculate_content_md5(12345)

    def test_guess_content_type(self):
        """Content type follows the resource's extension"""
        assert guess_content_type("/bucket/key.txt") == "text/plain"
        assert guess_content_type("/bucket/page.html") == "text/html"
        assert guess_content_type("/bucket/data.json") == "application/json"
        assert guess_content_type("/bucket/IMAGE.PNG") == "image/png"

    def test_guess_content_type_without_extension(self):
        assert guess_content_type("/bucket") == "application/octet-stream"
        assert guess_content_type("/bucket/dir.v1/object") == "application/octet-stream"
        assert guess_content_type("/bucket/trailing.") == "application/octet-stream"

    def test_guess_content_type_unknown_extension(self):
        assert guess_content_type("/bucket/file.notarealext") == "application/octet-stream"

    def test_format_http_date(self):
        """Dates are RFC 1123 in GMT"""
        assert format_http_date(1729495680) == FIXED_DATE
        assert format_http_date().endswith(" GMT")

    def test_is_oss_header(self):
        assert is_oss_header("x-oss-meta-foo")
        assert is_oss_header("X-Oss-Meta-Foo")
        assert is_oss_header("X-OSS-ACL")
        assert not is_oss_header("x-amz-date")
        assert not is_oss_header("Content-Type")
        assert not is_oss_header("my-x-oss-header")

    def test_find_header_case_insensitive(self):
        headers = {"Content-Type": "text/plain"}
        assert find_header(headers, "content-type") == "text/plain"
        assert find_header(headers, "CONTENT-TYPE") == "text/plain"
        assert find_header(headers, "Date") is None


class TestTypes:
    """Test request and credential types"""

    def test_sub_resource_variants(self):
        """None values become bare keys"""
        assert make_sub_resource("acl") == KeyOnly("acl")
        assert make_sub_resource("uploadId", "123") == KeyValue("uploadId", "123")
        assert make_sub_resource("partNumber", 2) == KeyValue("partNumber", "2")
        assert KeyOnly("acl").render() == "acl"
        assert KeyValue("uploadId", "123").render() == "uploadId=123"

    def test_sub_resource_key_required(self):
        with pytest.raises(RequestConstructionError):
            make_sub_resource("")

    def test_request_normalizes_sub_resources(self):
        request = make_request(sub_resources={"uploadId": "123", "partNumber": "1", "uploadId2": None})
        assert request.sub_resources == (
            KeyValue("uploadId", "123"),
            KeyValue("partNumber", "1"),
            KeyOnly("uploadId2"),
        )

    def test_request_duplicate_sub_resource_keeps_position(self):
        request = make_request(sub_resources=[KeyOnly("acl"), KeyOnly("x"), KeyValue("acl", "v")])
        assert request.sub_resources == (KeyValue("acl", "v"), KeyOnly("x"))

    def test_request_requires_host_path_resource(self):
        for name in ("host", "path", "resource"):
            with pytest.raises(RequestConstructionError) as exc_info:
                make_request(**{name: ""})
            assert exc_info.value.details["field"] == name

    def test_request_verb_validation(self):
        assert make_request(verb="get").verb == HttpMethod.GET
        assert make_request(verb=HttpMethod.DELETE).verb == HttpMethod.DELETE
        with pytest.raises(RequestConstructionError):
            make_request(verb="PATCH")

    def test_request_body_encoding(self):
        assert make_request(body="héllo").body == "héllo".encode("utf-8")
        assert make_request(body=None).body == b""
        with pytest.raises(RequestConstructionError):
            make_request(body=42)

    def test_request_is_immutable(self):
        request = make_request()
        with pytest.raises(AttributeError):
            request.host = "other"

    def test_request_header_lookup(self):
        request = make_request()
        assert request.header("content-md5") == "XUFAKrxLKna5cZ2REBfFkg=="
        assert request.header("Authorization") is None

    def test_credentials_validation(self):
        with pytest.raises(ValidationError):
            Credentials("", ACCESS_KEY_SECRET)
        with pytest.raises(ValidationError):
            Credentials(ACCESS_KEY_ID, "")
        with pytest.raises(ValidationError):
            Credentials(ACCESS_KEY_ID, "   ")
        with pytest.raises(ValidationError):
            Credentials(ACCESS_KEY_ID, None)

    def test_credentials_keep_secret_verbatim(self):
        padded = Credentials(ACCESS_KEY_ID, f" {ACCESS_KEY_SECRET} ")
        assert padded.access_key_secret == f" {ACCESS_KEY_SECRET} "

        request = make_request()
        stripped = Credentials(ACCESS_KEY_ID, ACCESS_KEY_SECRET)
        assert OssSigner(padded).sign(request) != OssSigner(stripped).sign(request)

    def test_credentials_repr_hides_secret(self):
        credentials = Credentials(ACCESS_KEY_ID, ACCESS_KEY_SECRET, "token")
        assert ACCESS_KEY_SECRET not in repr(credentials)
        assert "token" not in repr(credentials)
        assert ACCESS_KEY_ID in repr(credentials)


class TestCanonicalMessage:
    """Test canonical string construction"""

    def test_resource_without_sub_resources(self):
        assert canonicalize_resource("/bucket/key", None) == "/bucket/key"
        assert canonicalize_resource("/bucket/key", ()) == "/bucket/key"

    def test_resource_with_bare_sub_resource(self):
        assert canonicalize_resource("/bucket", (KeyOnly("acl"),)) == "/bucket?acl"

    def test_resource_with_valued_sub_resource(self):
        assert canonicalize_resource("/bucket/key", (KeyValue("uploadId", "123"),)) == "/bucket/key?uploadId=123"

    def test_resource_keeps_insertion_order(self):
        """Sub-resources are not sorted"""
        entries = (KeyValue("uploadId", "abc"), KeyValue("partNumber", "2"), KeyOnly("acl"))
        assert canonicalize_resource("/b/k", entries) == "/b/k?uploadId=abc&partNumber=2&acl"

    def test_oss_headers_selected_and_lowercased(self):
        headers = {
            "Content-Type": "text/plain",
            "X-Oss-Meta-Foo": "bar",
            "Date": FIXED_DATE,
        }
        assert canonicalize_oss_headers(headers) == "x-oss-meta-foo:bar\n"

    def test_oss_headers_keep_mapping_order(self):
        headers = {
            "x-oss-meta-zeta": "1",
            "X-OSS-ACL": "private",
            "x-oss-meta-alpha": "2",
        }
        assert canonicalize_oss_headers(headers) == (
            "x-oss-meta-zeta:1\nx-oss-acl:private\nx-oss-meta-alpha:2\n"
        )

    def test_oss_headers_empty(self):
        assert canonicalize_oss_headers({"Content-Type": "text/plain"}) == ""
        assert canonicalize_oss_headers({}) == ""

    def test_string_to_sign_layout(self):
        result = build_string_to_sign(
            verb="PUT",
            content_md5="md5",
            content_type="text/plain",
            date=FIXED_DATE,
            canonicalized_oss_headers="x-oss-a:1\n",
            canonicalized_resource="/bucket/key",
        )
        assert result == f"PUT\nmd5\ntext/plain\n{FIXED_DATE}\nx-oss-a:1\n/bucket/key"

    def test_string_to_sign_without_oss_headers(self):
        result = build_string_to_sign("GET", "", "", FIXED_DATE, "", "/bucket")
        assert result == f"GET\n\n\n{FIXED_DATE}\n/bucket"

    def test_build_canonical_message(self):
        request = make_request(
            headers={
                "Content-Type": "text/plain",
                "Content-MD5": "XUFAKrxLKna5cZ2REBfFkg==",
                "Date": FIXED_DATE,
                "X-Oss-Meta-Foo": "bar",
            },
            sub_resources={"acl": None},
        )
        assert build_canonical_message(request) == (
            "PUT\n"
            "XUFAKrxLKna5cZ2REBfFkg==\n"
            "text/plain\n"
            f"{FIXED_DATE}\n"
            "x-oss-meta-foo:bar\n"
            "/bucket/key.txt?acl"
        )

    def test_query_params_are_not_signed(self):
        plain = build_canonical_message(make_request())
        with_query = build_canonical_message(make_request(query_params={"max-keys": "10"}))
        assert plain == with_query

    def test_required_headers_lookup_is_case_insensitive(self):
        request = make_request(headers={
            "content-type": "text/plain",
            "content-md5": "XUFAKrxLKna5cZ2REBfFkg==",
            "date": FIXED_DATE,
        })
        assert build_canonical_message(request).startswith("PUT\nXUFAKrxLKna5cZ2REBfFkg==\ntext/plain\n")

    def test_missing_required_header(self):
        for missing in ("Content-Type", "Content-MD5", "Date"):
            headers = {
                "Content-Type": "text/plain",
                "Content-MD5": "XUFAKrxLKna5cZ2REBfFkg==",
                "Date": FIXED_DATE,
            }
            del headers[missing]
            with pytest.raises(SigningError) as exc_info:
                build_canonical_message(make_request(headers=headers))
            assert exc_info.value.code == SigningErrorCodes.MISSING_REQUIRED_HEADER
            assert exc_info.value.details["header"] == missing


class TestOssSigner:
    """Test HMAC-SHA1 signing"""

    def setup_method(self):
        """Set up test fixtures"""
        self.credentials = Credentials(ACCESS_KEY_ID, ACCESS_KEY_SECRET)
        self.signer = OssSigner(self.credentials)

    def test_sign_fixed_request(self):
        """Signature is a fixed value for a fixed secret and Date"""
        request = make_request()
        assert self.signer.sign(request) == "MUCuU6vRM3aotx4/8QuerNUn5f0="
        assert self.signer.authorization(request) == f"OSS {ACCESS_KEY_ID}:MUCuU6vRM3aotx4/8QuerNUn5f0="

    def test_sign_with_oss_headers(self):
        request = OssRequest(
            verb="PUT",
            host="oss-example.oss-cn-hangzhou.aliyuncs.com",
            path="/nelson",
            resource="/oss-example/nelson",
            headers={
                "Content-MD5": "eB5eJF1ptWaXm4bijSPyxw==",
                "Content-Type": "text/html",
                "Date": "Thu, 17 Nov 2005 18:49:58 GMT",
                "X-OSS-Magic": "abracadabra",
                "X-OSS-Meta-Author": "foo@example.com",
            },
        )
        assert self.signer.sign(request) == "8HQ6ejfvfwbs/JyzhzA/ElF4fx8="

    def test_sign_request_result(self):
        result = self.signer.sign_request(make_request())
        assert result.string_to_sign == (
            f"PUT\nXUFAKrxLKna5cZ2REBfFkg==\ntext/plain\n{FIXED_DATE}\n/bucket/key.txt"
        )
        assert result.signature == "MUCuU6vRM3aotx4/8QuerNUn5f0="
        assert result.authorization == f"OSS {ACCESS_KEY_ID}:{result.signature}"

    def test_signing_is_deterministic(self):
        request = make_request(sub_resources={"uploadId": "1", "partNumber": "3"})
        assert self.signer.sign(request) == self.signer.sign(request)
        assert self.signer.sign(request) == OssSigner(Credentials(ACCESS_KEY_ID, ACCESS_KEY_SECRET)).sign(request)

    def test_signature_depends_on_date(self):
        first = make_request()
        second = make_request(headers={**first.headers, "Date": "Tue, 22 Oct 2024 07:28:00 GMT"})
        assert self.signer.sign(first) != self.signer.sign(second)
        assert self.signer.sign(second) == "+prBBPPeLHDr0CSKH0IVRwyRbSg="

    def test_signature_depends_on_secret(self):
        other = OssSigner(Credentials(ACCESS_KEY_ID, "another-secret"))
        assert other.sign(make_request()) != self.signer.sign(make_request())

    def test_signing_does_not_mutate_request(self):
        request = make_request()
        headers_before = dict(request.headers)
        self.signer.sign_request(request)
        assert request.headers == headers_before
        assert "Authorization" not in request.headers

    def test_missing_header_fails(self):
        request = make_request(headers={"Date": FIXED_DATE})
        with pytest.raises(SigningError) as exc_info:
            self.signer.sign(request)
        assert exc_info.value.code == SigningErrorCodes.MISSING_REQUIRED_HEADER

    def test_rejects_non_request(self):
        with pytest.raises(SigningError) as exc_info:
            self.signer.sign({"host": "example.com"})
        assert exc_info.value.code == SigningErrorCodes.INVALID_REQUEST

    def test_rejects_invalid_credentials(self):
        with pytest.raises(SigningError) as exc_info:
            OssSigner((ACCESS_KEY_ID, ACCESS_KEY_SECRET))
        assert exc_info.value.code == SigningErrorCodes.INVALID_CREDENTIALS

    def test_module_helpers(self):
        assert isinstance(create_signer(self.credentials), OssSigner)
        result = sign_request(make_request(), self.credentials)
        assert result.signature == "MUCuU6vRM3aotx4/8QuerNUn5f0="

    def test_error_string_includes_code(self):
        error = SigningError("boom", SigningErrorCodes.SIGNING_FAILED, {"a": 1})
        assert "SIGNING_FAILED" in str(error)
        assert "SigningError(" in repr(error)
