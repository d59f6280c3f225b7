import pytest

from MoodMuseDjangoApp.errors import ProviderError, ProviderErrorKind
from MoodMuseDjangoApp.llm.images import FALLBACK_IMAGES, STYLE_TEMPLATES, ImageClient, styled_prompt

from conftest import fake_openai, openai_connection_error, openai_status_error


def make_client(outcomes, sleeps=None):
    return ImageClient(
        fake_openai(image_outcomes=outcomes),
        model="dall-e-3",
        delay_seconds=1.0,
        sleep=(sleeps.append if sleeps is not None else (lambda s: None)),
    )


def test_four_styles_four_images_in_order():
    sleeps = []
    client = make_client(["u1", "u2", "u3", "u4"], sleeps)

    assert client.generate("misty lake", 4) == ["u1", "u2", "u3", "u4"]

    calls = client.client.images.calls
    assert [c["prompt"] for c in calls] == [styled_prompt("misty lake", i) for i in range(4)]
    assert len({c["prompt"] for c in calls}) == 4
    assert all(c["prompt"].startswith("misty lake. ") for c in calls)
    assert calls[0] == {
        "model": "dall-e-3",
        "prompt": calls[0]["prompt"],
        "n": 1,
        "size": "1024x1024",
        "quality": "standard",
        "style": "natural",
    }
    assert sleeps == [1.0, 1.0, 1.0]


def test_two_of_four_is_a_short_success():
    client = make_client(["u1", openai_status_error(400), openai_connection_error(), "u4"])
    assert client.generate("misty lake", 4) == ["u1", "u4"]


def test_missing_url_counts_as_failed_attempt():
    client = make_client(["", "u2"])
    assert client.generate("p", 2) == ["u2"]


def test_all_failures_raise_no_images():
    client = make_client([openai_status_error(500)] * 4)
    with pytest.raises(ProviderError) as exc:
        client.generate("p", 4)
    assert exc.value.kind is ProviderErrorKind.NO_IMAGES_GENERATED
    assert len(client.client.images.calls) == 4


def test_count_is_capped_at_four():
    client = make_client(["a", "b", "c", "d", "e", "f"])
    assert client.generate("p", 10) == ["a", "b", "c", "d"]


@pytest.mark.parametrize("count", [0, -2])
def test_zero_count_is_empty_without_calls(count):
    client = make_client(["a"])
    assert client.generate("p", count) == []
    assert client.client.images.calls == []


def test_unconfigured():
    client = ImageClient(None)
    assert not client.is_configured()
    with pytest.raises(ProviderError) as exc:
        client.generate("p")
    assert exc.value.kind is ProviderErrorKind.UNCONFIGURED


def test_static_fallback_set():
    assert len(FALLBACK_IMAGES) == 4
    assert len(set(FALLBACK_IMAGES)) == 4
    assert [name for name, _ in STYLE_TEMPLATES] == ["lifestyle", "nature", "interior", "fashion"]
