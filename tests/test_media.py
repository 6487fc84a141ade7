"""Tests for NFT media validation and attribute conversions."""

from __future__ import annotations

import pytest

from clickcrate_actions.utils.conversions import (
    find_attribute,
    lamports_to_sol,
    parse_sizes,
    placement_type_value,
    product_category_value,
    size_options,
    sol_to_lamports,
    to_metaplex_attributes,
)
from clickcrate_actions.utils.media import (
    SUPPORTED_MEDIA_FILES,
    get_media_category,
    get_mime_type,
    validate_image_uri,
)


@pytest.mark.parametrize(
    "uri,extension",
    [
        ("https://example.com/a.png", "png"),
        ("https://example.com/path/b.JPEG", "jpeg"),
        ("https://arweave.net/x/y/clip.mp4", "mp4"),
        ("https://example.com/icon.svg", "svg"),
    ],
)
def test_validate_image_uri_accepts_supported(uri, extension):
    assert validate_image_uri(uri) == extension


def test_validate_image_uri_requires_extension():
    with pytest.raises(ValueError, match="Wrong file type provided"):
        validate_image_uri("https://example.com/image")


def test_validate_image_uri_rejects_unknown_extension():
    with pytest.raises(ValueError) as excinfo:
        validate_image_uri("https://example.com/image.bmp")

    assert str(excinfo.value) == (
        "Unsupported image type: bmp. Supported types are: jpg, jpeg, png, gif, svg"
    )


def test_get_mime_type():
    assert get_mime_type("jpg") == "image/jpeg"
    assert get_mime_type("SVG") == "image/svg+xml"
    with pytest.raises(ValueError):
        get_mime_type("bmp")


@pytest.mark.parametrize("extension", SUPPORTED_MEDIA_FILES)
def test_every_supported_extension_has_metadata_type(extension):
    assert get_mime_type(extension)
    assert get_media_category(extension) in {"image", "video", "audio", "vr"}


def test_media_categories():
    assert get_media_category("png") == "image"
    assert get_media_category("mov") == "video"
    assert get_mime_type("mov") == "video/quicktime"
    assert get_media_category("wav") == "audio"
    assert get_media_category("glb") == "vr"


def test_lamport_conversions():
    assert sol_to_lamports(0.5) == 500_000_000
    assert sol_to_lamports(0.1) == 100_000_000
    assert lamports_to_sol(2_500_000_000) == 2.5


def test_merchant_enum_values():
    assert product_category_value("Clothing") == "clothing"
    assert placement_type_value("Relatedpurchase") == "relatedpurchase"
    with pytest.raises(ValueError):
        product_category_value("Furniture")
    with pytest.raises(ValueError):
        placement_type_value("Billboard")


def test_size_options():
    assert parse_sizes("S, M ,L,") == [
        {"label": "S", "value": "S"},
        {"label": "M", "value": "M"},
        {"label": "L", "value": "L"},
    ]
    assert size_options("Unisex") == [{"label": "Unisex", "value": "Unisex"}]
    assert size_options(None) == []


def test_find_attribute_prefers_metadata_then_plugin():
    asset = {
        "content": {"metadata": {"attributes": [{"trait_type": "Size(s)", "value": "S,M"}]}},
        "plugins": {"attributes": {"data": {"attribute_list": [{"key": "Brand", "value": "ClickCrate"}]}}},
    }

    assert find_attribute(asset, "Size(s)") == "S,M"
    assert find_attribute(asset, "Brand") == "ClickCrate"
    assert find_attribute(asset, "Color") is None


def test_to_metaplex_attributes():
    assert to_metaplex_attributes([{"key": "Type", "value": "Product"}]) == [
        {"trait_type": "Type", "value": "Product"}
    ]
