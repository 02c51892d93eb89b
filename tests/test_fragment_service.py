"""Tests for the FragmentService workflows."""

import io

import pytest
from PIL import Image

from fragments.exceptions import (
    FragmentDataMissingError,
    IngestionMismatchError,
    MalformedContentTypeError,
    NotFoundError,
    TypeImmutableError,
    UnsupportedConversionError,
    UnsupportedTypeError,
    ValidationError,
)
from fragments.fragment import Fragment
from fragments.services import FragmentService


class TestCreate:
    def test_create_plain_text(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"Fragment Data")
        assert fragment.size == 13
        assert fragment.type == "text/plain"
        assert fragment.owner_id == owner_id
        assert service.list_fragments(owner_id) == [fragment.id]

    def test_create_keeps_charset(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain; charset=utf-8", b"hi")
        assert service.get_metadata(owner_id, fragment.id).type == "text/plain; charset=utf-8"

    def test_create_image(self, service, owner_id, png_bytes):
        fragment = service.create(owner_id, "image/png", png_bytes)
        assert fragment.size == len(png_bytes)

    def test_create_unsupported_type(self, service, owner_id):
        with pytest.raises(UnsupportedTypeError):
            service.create(owner_id, "application/msword", b"doc")
        assert service.list_fragments(owner_id) == []

    def test_create_malformed_header(self, service, owner_id):
        with pytest.raises(MalformedContentTypeError):
            service.create(owner_id, "not a content type", b"data")

    def test_create_mismatched_body(self, service, owner_id):
        with pytest.raises(IngestionMismatchError):
            service.create(owner_id, "application/json", b"{broken")
        assert service.list_fragments(owner_id) == []

    @pytest.mark.parametrize("body", [b"", b"   \n"])
    def test_create_empty_body(self, service, owner_id, body):
        with pytest.raises(ValidationError):
            service.create(owner_id, "text/plain", body)
        assert service.list_fragments(owner_id) == []

    def test_create_oversized_body(self, repository, owner_id):
        service = FragmentService(repository, max_fragment_size=4)
        with pytest.raises(ValidationError):
            service.create(owner_id, "text/plain", b"12345")
        assert service.create(owner_id, "text/plain", b"1234").size == 4

    def test_oversized_body_rejected_before_content_checks(self, repository, owner_id):
        service = FragmentService(repository, max_fragment_size=4)
        with pytest.raises(ValidationError) as exc_info:
            service.create(owner_id, "application/json", b"{not json at all")
        assert not isinstance(exc_info.value, IngestionMismatchError)
        assert "byte limit" in str(exc_info.value)

    def test_oversized_memoryview_counts_bytes(self, repository, owner_id):
        service = FragmentService(repository, max_fragment_size=4)
        with pytest.raises(ValidationError):
            service.create(owner_id, "text/plain", memoryview(b"12345"))

    def test_create_non_bytes(self, service, owner_id):
        with pytest.raises(ValidationError):
            service.create(owner_id, "text/plain", "a string")


class TestRead:
    def test_read_plain_text(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"Fragment Data")
        assert service.read(owner_id, fragment.id) == (b"Fragment Data", "text/plain")
        assert service.read(owner_id, fragment.id, "txt") == (b"Fragment Data", "text/plain")

    def test_read_returns_stored_type_with_parameters(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain; charset=utf-8", b"x")
        assert service.read(owner_id, fragment.id) == (b"x", "text/plain; charset=utf-8")

    def test_plain_text_cannot_become_html(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"Fragment Data")
        with pytest.raises(UnsupportedConversionError) as exc_info:
            service.read(owner_id, fragment.id, "html")
        assert exc_info.value.fragment_id == fragment.id
        assert exc_info.value.extension == "html"

    def test_markdown_conversions(self, service, owner_id):
        fragment = service.create(owner_id, "text/markdown", b"# H")
        assert service.read(owner_id, fragment.id, "html") == (b"<h1>H</h1>\n", "text/html")
        assert service.read(owner_id, fragment.id, "txt") == (b"H\n", "text/plain")
        assert service.read(owner_id, fragment.id, "md") == (b"# H", "text/markdown")

    def test_json_conversions(self, service, owner_id):
        fragment = service.create(owner_id, "application/json", b'{"a":1}')
        assert service.read(owner_id, fragment.id, "txt") == (b'{\n  "a": 1\n}', "text/plain")
        assert service.read(owner_id, fragment.id, "json") == (b'{"a":1}', "application/json")
        with pytest.raises(UnsupportedConversionError):
            service.read(owner_id, fragment.id, "html")

    def test_image_conversion(self, service, owner_id, png_bytes):
        fragment = service.create(owner_id, "image/png", png_bytes)
        data, mime_type = service.read(owner_id, fragment.id, "webp")
        assert mime_type == "image/webp"
        with Image.open(io.BytesIO(data)) as image:
            assert image.format == "WEBP"

    @pytest.mark.parametrize("extension", ["HTML", ".html", " html ", ".Html"])
    def test_extension_is_normalized(self, service, owner_id, extension):
        fragment = service.create(owner_id, "text/markdown", b"# H")
        assert service.read(owner_id, fragment.id, extension) == (b"<h1>H</h1>\n", "text/html")

    def test_normalized_image_extension_reports_media_type(self, service, owner_id, png_bytes):
        fragment = service.create(owner_id, "image/png", png_bytes)
        _, mime_type = service.read(owner_id, fragment.id, ".JPG")
        assert mime_type == "image/jpeg"

    def test_read_missing(self, service, owner_id):
        with pytest.raises(NotFoundError):
            service.read(owner_id, "missing")

    def test_read_other_owner(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"secret")
        with pytest.raises(NotFoundError):
            service.read("another-owner", fragment.id)
        with pytest.raises(NotFoundError):
            service.get_metadata("another-owner", fragment.id)

    def test_read_metadata_without_data(self, service, repository, owner_id):
        fragment = Fragment(owner_id=owner_id, type="text/plain", repository=repository)
        fragment.save()
        with pytest.raises(FragmentDataMissingError):
            service.read(owner_id, fragment.id)

    def test_unsupported_conversion_checked_before_data(self, service, repository, owner_id):
        fragment = Fragment(owner_id=owner_id, type="text/plain", repository=repository)
        fragment.save()
        with pytest.raises(UnsupportedConversionError):
            service.read(owner_id, fragment.id, "html")


class TestReadReference:
    def test_reference_without_extension(self, service, owner_id):
        fragment = service.create(owner_id, "text/markdown", b"# H")
        assert service.read_reference(owner_id, fragment.id) == (b"# H", "text/markdown")

    def test_reference_with_extension(self, service, owner_id):
        fragment = service.create(owner_id, "text/markdown", b"# H")
        assert service.read_reference(owner_id, f"{fragment.id}.html") == (b"<h1>H</h1>\n", "text/html")

    def test_reference_with_trailing_dot_is_a_literal_id(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"x")
        with pytest.raises(NotFoundError) as exc_info:
            service.read_reference(owner_id, f"{fragment.id}.")
        assert exc_info.value.fragment_id == f"{fragment.id}."

    def test_reference_with_unknown_extension(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"x")
        with pytest.raises(UnsupportedConversionError):
            service.read_reference(owner_id, f"{fragment.id}.pdf")


class TestList:
    def test_list_ids(self, service, owner_id):
        ids = [service.create(owner_id, "text/plain", f"{i}".encode()).id for i in range(3)]
        assert sorted(service.list_fragments(owner_id)) == sorted(ids)

    def test_list_expanded(self, service, owner_id):
        created = service.create(owner_id, "application/json", b"[1]")
        [fragment] = service.list_fragments(owner_id, expand=True)
        assert fragment == created
        assert fragment.to_dict()["formats"] == ["application/json", "text/plain"]

    def test_list_is_per_owner(self, service, owner_id):
        service.create(owner_id, "text/plain", b"mine")
        assert service.list_fragments("another-owner") == []


class TestUpdate:
    def test_update_replaces_data(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"old")
        updated = service.update(owner_id, fragment.id, "text/plain", b"new data")

        assert updated.size == 8
        assert updated.created == fragment.created
        assert updated.updated > fragment.updated
        assert service.read(owner_id, fragment.id) == (b"new data", "text/plain")

    def test_update_allows_parameter_change(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"old")
        service.update(owner_id, fragment.id, "text/plain; charset=utf-8", b"new")
        assert service.read(owner_id, fragment.id)[0] == b"new"

    def test_update_type_change_rejected(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"original")
        with pytest.raises(TypeImmutableError) as exc_info:
            service.update(owner_id, fragment.id, "text/markdown", b"# changed")

        assert exc_info.value.stored_type == "text/plain"
        assert exc_info.value.declared_type == "text/markdown"
        stored = service.get_metadata(owner_id, fragment.id)
        assert stored.type == "text/plain"
        assert stored.size == fragment.size
        assert stored.updated == fragment.updated
        assert service.read(owner_id, fragment.id)[0] == b"original"

    def test_update_missing(self, service, owner_id):
        with pytest.raises(NotFoundError):
            service.update(owner_id, "missing", "text/plain", b"x")

    def test_update_mismatched_body(self, service, owner_id):
        fragment = service.create(owner_id, "application/json", b"{}")
        with pytest.raises(IngestionMismatchError):
            service.update(owner_id, fragment.id, "application/json", b"{nope")
        assert service.read(owner_id, fragment.id)[0] == b"{}"

    def test_update_oversized(self, repository, owner_id):
        service = FragmentService(repository, max_fragment_size=4)
        fragment = service.create(owner_id, "text/plain", b"abc")
        with pytest.raises(ValidationError):
            service.update(owner_id, fragment.id, "text/plain", b"abcde")

    def test_update_oversized_checked_before_content(self, repository, owner_id):
        service = FragmentService(repository, max_fragment_size=4)
        fragment = service.create(owner_id, "application/json", b"{}")
        with pytest.raises(ValidationError) as exc_info:
            service.update(owner_id, fragment.id, "application/json", b"{broken json")
        assert "byte limit" in str(exc_info.value)
        assert service.read(owner_id, fragment.id)[0] == b"{}"

    def test_update_malformed_header(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"abc")
        with pytest.raises(MalformedContentTypeError):
            service.update(owner_id, fragment.id, "", b"x")


class TestDelete:
    def test_delete(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"bye")
        service.delete(owner_id, fragment.id)

        with pytest.raises(NotFoundError):
            service.read(owner_id, fragment.id)
        with pytest.raises(NotFoundError):
            service.get_metadata(owner_id, fragment.id)
        assert service.list_fragments(owner_id) == []

    def test_delete_missing(self, service, owner_id):
        with pytest.raises(NotFoundError):
            service.delete(owner_id, "missing")
        with pytest.raises(NotFoundError):
            service.read(owner_id, "missing")

    def test_delete_other_owner(self, service, owner_id):
        fragment = service.create(owner_id, "text/plain", b"keep")
        with pytest.raises(NotFoundError):
            service.delete("another-owner", fragment.id)
        assert service.read(owner_id, fragment.id)[0] == b"keep"
