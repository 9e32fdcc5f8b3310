"""Shared fixtures for patent_ranker tests.

No test touches the network: the LLM gateway is replaced by FakeLLMClient
(or litellm.completion is monkeypatched in test_llm_client.py).
"""

import json
import sys
from pathlib import Path

import pytest

# Add repo root to path so tests can import patent_ranker without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from patent_ranker.config import ScoringSettings  # noqa: E402
from patent_ranker.llm.llm_client import LLMResponse  # noqa: E402
from patent_ranker.llm.schemas import CATEGORY_KEYS, DocumentInput  # noqa: E402

BATTERY_PROBLEM = "reduce battery charging time"


def oracle_record(document_id, scores=(80, 70, 60, 50, 40, 30), rationale="Solid rationale.", **extra):
    """One record shaped the way the model is asked to return it."""
    record = {
        "id": document_id,
        "perCategory": {key: {"score": score, "rationale": rationale} for key, score in zip(CATEGORY_KEYS, scores)},
    }
    record.update(extra)
    return record


def oracle_text(ids, **kwargs) -> str:
    return json.dumps({"results": [oracle_record(i, **kwargs) for i in ids]})


class FakeLLMClient:
    """Stand-in gateway. Answers every id in the payload unless scripted.

    ``script`` items are consumed one per call: a str is returned as the
    response text, an Exception is raised.
    """

    def __init__(self, script=None):
        self.script = list(script or [])
        self.calls = []

    def generate(
        self, prompt, system_prompt=None, temperature=0.2, max_tokens=3000, json_mode=True, prompt_version=None
    ):
        payload = json.loads(prompt)
        self.calls.append(
            {
                "payload": payload,
                "system_prompt": system_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "json_mode": json_mode,
                "prompt_version": prompt_version,
            }
        )
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            text = item
        else:
            text = oracle_text(payload["expectedIds"])
        return LLMResponse(text=text, model="fake-model", provider="test", prompt_version=prompt_version or "")

    @property
    def chunk_ids(self):
        return [call["payload"]["expectedIds"] for call in self.calls]


def make_document(document_id: str, metadata: str = "Fast-charge anode coating, Acme Corp, 2021") -> DocumentInput:
    return DocumentInput(
        id=document_id,
        metadata=metadata,
        strategicRelevance="Targets lithium plating during fast charge.",
        technicalStrength="Independent claims cover the coating method.",
        legalDurability="Family filed in US, EP, CN.",
        marketLeverage="EV and consumer electronics OEMs.",
        freedomToOperate="Alternative electrolytes may design around.",
        licensingFeasibility="Owned by a single university, open to licensing.",
    )


@pytest.fixture
def sample_documents():
    """Three fully populated patents with ids 1..3."""
    return [make_document(str(i)) for i in range(1, 4)]


@pytest.fixture
def battery_request(sample_documents):
    """Wire-format request for the battery problem."""
    return {
        "problemStatement": BATTERY_PROBLEM,
        "patents": [d.model_dump(by_alias=True) for d in sample_documents],
    }


@pytest.fixture
def real_settings():
    """Settings with a credential and no inter-chunk pause."""
    return ScoringSettings(api_key="sk-test", chunk_pause_seconds=0.0)


@pytest.fixture
def mock_settings():
    """Settings with no credential (mock mode)."""
    return ScoringSettings(api_key=None)


@pytest.fixture
def fake_llm():
    return FakeLLMClient()
