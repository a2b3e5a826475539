"""Tests for resource data objects."""

import pytest

from braintree_gateway.resource import AccessToken, Resource


class TestAccessToken:
    def test_factory_stores_attributes(self) -> None:
        token = AccessToken.factory({"id": "tok1", "value": "abc"})
        assert isinstance(token, AccessToken)
        assert token.id == "tok1"
        assert token.value == "abc"
        assert token.attributes == {"id": "tok1", "value": "abc"}

    def test_string_lists_attributes(self) -> None:
        token = AccessToken.factory({"id": "tok1", "value": "abc"})
        text = str(token)
        assert text == "AccessToken[id='tok1', value='abc']"
        assert repr(token) == text

    def test_unknown_attribute_raises(self) -> None:
        token = AccessToken.factory({"id": "tok1"})
        with pytest.raises(AttributeError, match="expires_at"):
            token.expires_at

    def test_read_only(self) -> None:
        token = AccessToken.factory({"id": "tok1"})
        with pytest.raises(AttributeError):
            token.id = "other"

    def test_mapping_copied_at_construction(self) -> None:
        attributes = {"id": "tok1"}
        token = AccessToken.factory(attributes)
        attributes["id"] = "changed"
        assert token.id == "tok1"

    def test_equality_by_type_and_attributes(self) -> None:
        assert AccessToken.factory({"id": "t"}) == AccessToken.factory({"id": "t"})
        assert AccessToken.factory({"id": "t"}) != AccessToken.factory({"id": "u"})
        assert AccessToken.factory({"id": "t"}) != Resource.factory({"id": "t"})

    def test_from_decoded_response(self) -> None:
        decoded = {"access_token": {"id": "tok1", "value": "abc", "scope": None}}
        token = AccessToken.factory(decoded["access_token"])
        assert token.scope is None
        assert "scope=None" in str(token)
