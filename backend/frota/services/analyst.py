"""Operational summary written by an external text-generation service."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from openai import AsyncOpenAI

from frota.core.config import Settings, get_settings
from frota.core.logging import logger
from frota.models.requests import VehicleRequest


NOT_CONFIGURED_MESSAGE = "Chave de API não configurada. Configure a API Key para obter insights."
CONNECTION_ERROR_MESSAGE = "Erro ao conectar com a IA. Verifique sua chave de API ou tente novamente mais tarde."
EMPTY_RESPONSE_MESSAGE = "Não foi possível gerar a análise."

PROMPT_TEMPLATE = """Atue como um gerente de frota experiente. Analise os seguintes dados de pedidos (em JSON) e forneça um resumo operacional breve (máximo 3 parágrafos) em Português.

Dados: {data}

Foque em:
1. Volume de pendentes vs confirmados.
2. Alertas sobre falta de motoristas (se houver).
3. Sugestão de ação imediata.

Use formatação Markdown simples."""


def summarize_requests(records: Iterable[VehicleRequest]) -> List[Dict[str, Any]]:
    """Reduced view of each request: no names, contacts or locations."""
    return [
        {
            "type": record.request_type.label,
            "status": record.status.label,
            "date": record.pickup_date.strftime("%Y-%m-%dT%H:%M"),
            "driver": bool(record.assigned_driver),
        }
        for record in records
    ]


def build_prompt(records: Iterable[VehicleRequest]) -> str:
    data = json.dumps(summarize_requests(records), ensure_ascii=False)
    return PROMPT_TEMPLATE.format(data=data)


class OperationsAnalyst:
    """Sends the trimmed request summary to the configured model."""

    def __init__(self, settings: Settings | None = None, client: Any = None) -> None:
        self.settings = settings or get_settings()
        self.model = self.settings.llm_model
        self._client = client

    def is_configured(self) -> bool:
        return self._client is not None or self.settings.resolved_api_key() is not None

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.resolved_api_key(),
                base_url=self.settings.resolved_base_url(),
                timeout=self.settings.llm_timeout_seconds,
            )
            logger.info("Using OpenAI-compatible provider for analysis", model=self.model)
        return self._client

    async def analyze(self, records: Iterable[VehicleRequest]) -> str:
        """Return the model's text, or a fixed message when it cannot be produced."""
        if not self.is_configured():
            logger.warning("Analysis requested but no API key is configured")
            return NOT_CONFIGURED_MESSAGE

        prompt = build_prompt(records)
        try:
            response = await self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.settings.llm_temperature,
                max_tokens=self.settings.llm_max_tokens,
            )
            text = (response.choices[0].message.content or "").strip()
        except Exception as exc:
            logger.error("Analysis request failed", model=self.model, error=str(exc))
            return CONNECTION_ERROR_MESSAGE

        return text or EMPTY_RESPONSE_MESSAGE
