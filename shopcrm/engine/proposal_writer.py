"""
Proposal Writer - Sales proposals and feasibility notes via AI.

Results are always returned as a Result: ok with the generated text, or a
failure carrying the error plus a placeholder text the screen can show.
ProposalSlot keeps at most one request current, so a late answer to an
older request can never overwrite a newer one.
"""

import logging
import threading
from typing import Optional

from shopcrm.logging_config import log_call
from shopcrm.engine.ai_client import call_ai
from shopcrm.engine.quotes import format_items
from shopcrm.models import Result
from shopcrm.bus.events import bus, EVENT_PROPOSAL_READY
from shopcrm.config import config

logger = logging.getLogger(__name__)

EMPTY_PROPOSAL_TEXT = "Não foi possível gerar a proposta no momento."
CONNECTION_ERROR_TEXT = "Erro ao conectar com o assistente inteligente."

SYSTEM_PROMPT = "Você é um especialista em vendas de serralheria."


# =============================================================================
# PROMPTS
# =============================================================================

def build_proposal_prompt(client_name: str, project_title: str, items, total_value: float) -> str:
    company = config.COMPANY_NAME
    return f"""Você é um assistente de vendas da "{company}".
Escreva uma mensagem formal e persuasiva para enviar pelo WhatsApp ou Email para o cliente.

Dados do Cliente: {client_name}
Projeto: {project_title}

Itens:
{format_items(items)}

Valor Total: R$ {total_value:.2f}

A mensagem deve:
1. Cumprimentar o cliente.
2. Descrever brevemente a qualidade do serviço (metais de alta resistência, acabamento fino).
3. Listar o valor total.
4. Mencionar que aceitamos cartão e pix.
5. Ter um tom profissional mas acessível.
6. Ser formatada em Markdown simples."""


def build_feasibility_prompt(description: str) -> str:
    return (
        "Analise o seguinte pedido de serralheria e liste 3 possíveis desafios "
        f"técnicos e 3 materiais recomendados:\n\n\"{description}\""
    )


# =============================================================================
# GENERATION
# =============================================================================

@log_call
def generate_proposal(
    client_name: str,
    project_title: str,
    items,
    total_value: float,
    model: Optional[str] = None,
) -> Result:
    """
    Ask the AI for a client-facing proposal.

    Returns: Result.success(text), or Result.failure(error, placeholder text)
    """
    prompt = build_proposal_prompt(client_name, project_title, items, total_value)

    try:
        text = call_ai(prompt, model=model, system=SYSTEM_PROMPT, max_tokens=1500, temperature=0.7)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Proposal generation failed for '{project_title}': {e}")
        return Result.failure(str(e), value=CONNECTION_ERROR_TEXT)

    if not text or not text.strip():
        logger.warning(f"Proposal generation returned no text for '{project_title}'")
        return Result.failure("empty response", value=EMPTY_PROPOSAL_TEXT)

    bus.emit(EVENT_PROPOSAL_READY, {'client_name': client_name, 'project_title': project_title})
    return Result.success(text.strip())


@log_call
def analyze_feasibility(description: str, model: Optional[str] = None) -> Result:
    """Three technical risks and three recommended materials for a job description."""
    if not description or not description.strip():
        return Result.failure("empty description", value='')

    try:
        text = call_ai(build_feasibility_prompt(description.strip()), model=model, max_tokens=1200)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Feasibility analysis failed: {e}")
        return Result.failure(str(e), value='')

    if not text or not text.strip():
        return Result.failure("empty response", value='')
    return Result.success(text.strip())


# =============================================================================
# REQUEST GUARD
# =============================================================================

class ProposalSlot:
    """
    Holds the latest proposal result and the token of the request allowed to fill it.

    begin() supersedes whatever is pending; resolve() accepts a result only
    for the current token; cancel() drops the pending request.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counter = 0
        self._current: Optional[int] = None
        self.result: Optional[Result] = None

    @property
    def in_flight(self) -> bool:
        return self._current is not None

    def begin(self) -> int:
        with self._lock:
            self._counter += 1
            if self._current is not None:
                logger.debug(f"ProposalSlot: request {self._current} superseded by {self._counter}")
            self._current = self._counter
            return self._counter

    def resolve(self, token: int, result: Result) -> bool:
        """Store `result` if `token` is still current. Returns False for stale tokens."""
        with self._lock:
            if token != self._current:
                logger.debug(f"ProposalSlot: discarding stale result for request {token}")
                return False
            self.result = result
            self._current = None
            return True

    def cancel(self) -> None:
        with self._lock:
            self._current = None


def draft_proposal(slot: ProposalSlot, client_name: str, project_title: str, items, total_value: float,
                   model: Optional[str] = None) -> Optional[Result]:
    """
    One full round through the slot.
    Returns: the result if it was accepted, None if a newer request took over meanwhile
    """
    token = slot.begin()
    result = generate_proposal(client_name, project_title, items, total_value, model=model)
    return result if slot.resolve(token, result) else None
