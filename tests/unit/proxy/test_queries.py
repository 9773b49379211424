"""Unit tests for proxy/queries.py — Drive query construction."""

from drive_picker.proxy.queries import escape_query_text, listing_query, search_query


class TestEscapeQueryText:
    def test_escapes_single_quote(self) -> None:
        assert escape_query_text("O'Brien") == "O\\'Brien"

    def test_escapes_every_quote(self) -> None:
        assert escape_query_text("'a'b'") == "\\'a\\'b\\'"

    def test_plain_text_unchanged(self) -> None:
        assert escape_query_text("beach house") == "beach house"


class TestListingQuery:
    def test_scopes_to_parent_folders_and_images(self) -> None:
        assert listing_query("f1") == (
            "'f1' in parents and trashed = false and "
            "(mimeType = 'application/vnd.google-apps.folder' or mimeType contains 'image/')"
        )


class TestSearchQuery:
    def test_matches_image_names(self) -> None:
        assert search_query("beach") == (
            "name contains 'beach' and mimeType contains 'image/' and trashed = false"
        )

    def test_embeds_escaped_text(self) -> None:
        assert "name contains 'O\\'Brien'" in search_query("O'Brien")
