import json
import logging
from typing import Sequence

import httpx

from stoper.config import Settings
from stoper.constants import INSIGHTS_FALLBACK
from stoper.schemas import ToolRead, WithdrawalRead

logger = logging.getLogger(__name__)

PROMPT = """
Analise o seguinte estoque de ferramentas de perfuração e o histórico de retiradas recentes.
Forneça um breve resumo (máximo 3 parágrafos) sobre:
1. Quais modelos (T45, T50, T51) estão sendo mais exigidos.
2. Alertas críticos de reposição.
3. Sugestão de otimização baseada nos motivos de retirada.

Estoque Atual: {inventory}
Histórico de Retiradas: {history}
"""

HISTORY_WINDOW = 10


def build_prompt(inventory: Sequence[ToolRead], withdrawals: Sequence[WithdrawalRead]) -> str:
    inv = [t.model_dump(mode="json", exclude={"updated_at"}) for t in inventory]
    # withdrawals arrive newest first
    hist = [w.model_dump(mode="json") for w in withdrawals[:HISTORY_WINDOW]]
    return PROMPT.format(
        inventory=json.dumps(inv, ensure_ascii=False),
        history=json.dumps(hist, ensure_ascii=False),
    )


class InsightClient:
    def __init__(self, settings: Settings, client: httpx.Client | None = None):
        self.settings = settings
        self._client = client

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.settings.gemini_base_url,
                timeout=self.settings.insights_timeout,
            )
        return self._client

    def generate(self, inventory: Sequence[ToolRead], withdrawals: Sequence[WithdrawalRead]) -> str:
        if not self.settings.gemini_api_key:
            logger.info("no gemini_api_key configured, returning placeholder insights")
            return INSIGHTS_FALLBACK

        body = {
            "contents": [{"parts": [{"text": build_prompt(inventory, withdrawals)}]}],
            "generationConfig": {"temperature": 0.7},
        }
        try:
            r = self._http().post(
                f"/models/{self.settings.gemini_model}:generateContent",
                params={"key": self.settings.gemini_api_key},
                json=body,
            )
            r.raise_for_status()
            data = r.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("insight generation failed: %s", e)
            return INSIGHTS_FALLBACK

        return text.strip() or INSIGHTS_FALLBACK

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
