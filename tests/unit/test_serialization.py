"""Unit tests for the JSON encoder and decoder."""

import json
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from pydantic import BaseModel, Field, ValidationError

from restclient.http import Decoder, Encoder, JSONDecoder, JSONEncoder


class Campaign(BaseModel):
    campaign_id: str = Field(alias="campaignId")
    budget: Optional[float] = None
    tags: List[str] = []


def test_json_codecs_satisfy_protocols():
    assert isinstance(JSONEncoder(), Encoder)
    assert isinstance(JSONDecoder(), Decoder)


@pytest.mark.parametrize(
    "value, value_type",
    [
        ({"name": "name"}, Dict[str, str]),
        ([1, 2, 3], List[int]),
        ("text", str),
        (None, Optional[int]),
    ],
)
def test_round_trip(value, value_type):
    assert JSONDecoder().decode(JSONEncoder().encode(value), value_type) == value


def test_model_round_trip(model, model_type):
    assert JSONDecoder().decode(JSONEncoder().encode(model), model_type) == model


def test_encoder_uses_aliases_by_default():
    campaign = Campaign(campaignId="c-1", budget=10.5)
    assert json.loads(JSONEncoder().encode(campaign)) == {
        "campaignId": "c-1",
        "budget": 10.5,
        "tags": [],
    }


def test_encoder_options():
    campaign = Campaign(campaignId="c-1")
    encoded = JSONEncoder(by_alias=False, exclude_none=True, indent=2).encode(campaign)
    assert json.loads(encoded) == {"campaign_id": "c-1", "tags": []}
    assert b"\n  " in encoded


def test_encoder_handles_datetimes():
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert json.loads(JSONEncoder().encode({"at": stamp})) == {
        "at": "2024-01-02T03:04:05Z"
    }


def test_decoder_lax_and_strict():
    assert JSONDecoder().decode(b'"1"', int) == 1
    with pytest.raises(ValidationError):
        JSONDecoder(strict=True).decode(b'"1"', int)


def test_decoder_validates_aliases():
    campaign = JSONDecoder().decode(b'{"campaignId": "c-9"}', Campaign)
    assert campaign.campaign_id == "c-9"
