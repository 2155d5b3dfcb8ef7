import pytest

from sketchstack.diagram.cloud_icons import (
    CLOUD_PROVIDERS,
    NEUTRAL_ICONS,
    icon_style,
    is_provider_shape,
    normalize_provider,
)
from sketchstack.models.architecture_plan import ComponentType


def test_neutral_table_is_total():
    assert set(NEUTRAL_ICONS) == set(ComponentType)


@pytest.mark.parametrize("provider", CLOUD_PROVIDERS)
def test_every_type_has_a_style_for_every_provider(provider):
    for kind in ComponentType:
        assert icon_style(kind, provider)


def test_provider_style_only_for_non_neutral():
    assert icon_style("database", "aws").startswith("shape=mxgraph.aws4.dynamodb;")
    assert icon_style("database", "aws").endswith("aspect=fixed;resizable=0;fontStyle=1;")
    assert icon_style("database", "neutral") == NEUTRAL_ICONS[ComponentType.DATABASE]


def test_missing_provider_entry_falls_back_to_neutral():
    assert icon_style("frontend", "gcp") == NEUTRAL_ICONS[ComponentType.FRONTEND]
    assert not is_provider_shape("frontend", "gcp")


def test_unknown_type_uses_other_style():
    assert icon_style("teleporter", "neutral") == NEUTRAL_ICONS[ComponentType.OTHER]


def test_normalize_provider():
    assert normalize_provider(" AWS ") == "aws"
    assert normalize_provider(None) == "neutral"
    assert normalize_provider("oracle") == "neutral"


def test_is_provider_shape():
    assert is_provider_shape("queue", "aws")
    assert not is_provider_shape("queue", "neutral")
