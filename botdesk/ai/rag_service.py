"""
RAG Service - retrieval, prompt assembly, generation and usage metering
for a single question
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate
from sqlalchemy.orm import Session

from botdesk.ai.base import BaseEmbeddingService
from botdesk.ai.factory import get_embedding_service, get_model_service
from botdesk.ai.filters import Scope, build_document_filter
from botdesk.ai.vector_store import VectorStoreService, get_vector_store_service
from botdesk.config import settings
from botdesk.models.usage_event import UsageEventType
from botdesk.services.usage_events_service import UsageEventsService, get_usage_events_service

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Use the following pieces of context "
    "to answer the question at the end."
)

# system_prompt is a variable so braces in user prompts are never parsed
RAG_PROMPT_TEMPLATE = """{system_prompt}

If you don't know the answer, just say that you don't know, don't try to make up an answer.

Context:
{context}

Chat History:
{history}

Question: {question}
Helpful Answer:"""


def format_context(chunks: List[Dict[str, Any]]) -> str:
    return "\n\n".join(chunk.get("content") or "" for chunk in chunks)


def format_history(history: List[Dict[str, str]]) -> str:
    return "\n".join(f"{turn['role']}: {turn['content']}" for turn in history)


class RAGService:
    """
    Answer one question from a document scope

    Steps are strictly sequential: embed, search, generate, then three
    usage events written one after another on the caller's session.
    """

    def __init__(
        self,
        vector_store: Optional[VectorStoreService] = None,
        embedding_service: Optional[BaseEmbeddingService] = None,
        usage_events: Optional[UsageEventsService] = None,
        top_k: Optional[int] = None
    ):
        self.vector_store = vector_store or get_vector_store_service()
        self.embedding_service = embedding_service or self.vector_store.embedding_service or get_embedding_service()
        self.usage_events = usage_events or get_usage_events_service()
        self.top_k = top_k or settings.RAG_TOP_K
        self.prompt = PromptTemplate.from_template(RAG_PROMPT_TEMPLATE)

    def render_prompt(
        self,
        question: str,
        context: str,
        history: str,
        system_prompt: Optional[str] = None
    ) -> str:
        return self.prompt.format(
            system_prompt=system_prompt or DEFAULT_SYSTEM_PROMPT,
            context=context,
            history=history,
            question=question,
        )

    async def chat(
        self,
        question: str,
        history: List[Dict[str, str]],
        document_filter: Scope,
        system_prompt: Optional[str],
        user_id,
        llm_config,
        temperature: float,
        max_tokens: int,
        session: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Answer a question with retrieval-augmented generation

        Args:
            question: User question
            history: Prior turns as [{"role", "content"}], oldest first
            document_filter: One document id or a collection of ids
            system_prompt: Chatbot instructions (default prompt if empty)
            user_id: Account charged for usage
            llm_config: LLMConfig (provider, model_name, api_key, base_url)
            temperature: Sampling temperature
            max_tokens: Completion token cap
            session: Caller transaction for the usage events

        Returns:
            {"response": str, "sources": [chunks in retrieval rank order]}
        """
        # Validate the scope and model before any upstream call
        points_filter = build_document_filter(document_filter)
        model_service = get_model_service(llm_config.provider)
        model = model_service.get_model(llm_config, temperature, max_tokens)

        logger.info(f"RAG question: {question[:100]}")

        query_vector = await self.embedding_service.embed_query(question)
        sources = await self.vector_store.search(query_vector, points_filter, limit=self.top_k)

        logger.info(f"Retrieved {len(sources)} chunks")
        for i, source in enumerate(sources, 1):
            logger.debug(f"  Source #{i}: {source['content'][:100]} (document: {source['document_id']})")

        context = format_context(sources)
        prompt_text = self.render_prompt(
            question=question,
            context=context,
            history=format_history(history),
            system_prompt=system_prompt,
        )

        chain = model | StrOutputParser()
        response = await chain.ainvoke(prompt_text)

        self._track_usage(
            user_id=user_id,
            llm_config=llm_config,
            model_service=model_service,
            prompt_text=prompt_text,
            response=response,
            context=context,
            session=session,
        )

        return {"response": response, "sources": sources}

    def _track_usage(
        self,
        user_id,
        llm_config,
        model_service,
        prompt_text: str,
        response: str,
        context: str,
        session: Optional[Session]
    ) -> None:
        try:
            input_tokens = model_service.count_tokens(prompt_text, llm_config.model_name)
            output_tokens = model_service.count_tokens(response, llm_config.model_name)
            context_tokens = self.embedding_service.count_tokens(context)

            self.usage_events.create_event(
                user_id, llm_config.model_name, llm_config.provider,
                input_tokens, UsageEventType.LLM_INPUT, session
            )
            self.usage_events.create_event(
                user_id, llm_config.model_name, llm_config.provider,
                output_tokens, UsageEventType.LLM_OUTPUT, session
            )
            self.usage_events.create_event(
                user_id,
                self.embedding_service.get_model_name(),
                self.embedding_service.get_provider_name(),
                context_tokens,
                UsageEventType.QUERY_DOCUMENT,
                session
            )
        except Exception as e:
            logger.error(f"Error tracking chat usage: {e}")

    async def get_chunks(
        self,
        chunk_ids: List[str],
        document_filter: Optional[Scope] = None
    ) -> List[Dict[str, Any]]:
        # An empty document scope can resolve nothing
        if document_filter is not None and not document_filter:
            return []
        return await self.vector_store.get_chunks_by_ids(chunk_ids, document_filter)

    async def hydrate_messages(
        self,
        messages: List[Dict[str, Any]],
        document_filter: Optional[Scope] = None
    ) -> List[Dict[str, Any]]:
        """
        Attach resolved sources to messages that reference chunks

        Messages without chunk_ids pass through unchanged. References that
        no longer resolve (deleted documents, or documents outside
        document_filter) are dropped from sources.
        """
        chunk_ids = list(dict.fromkeys(
            chunk_id
            for message in messages
            for chunk_id in (message.get("chunk_ids") or [])
        ))
        if not chunk_ids:
            return messages

        chunks = await self.get_chunks(chunk_ids, document_filter)
        chunk_map = {chunk["chunk_id"]: chunk for chunk in chunks}

        hydrated = []
        for message in messages:
            if message.get("chunk_ids"):
                message = {
                    **message,
                    "sources": [chunk_map[cid] for cid in message["chunk_ids"] if cid in chunk_map],
                }
            hydrated.append(message)
        return hydrated


@lru_cache(maxsize=1)
def get_rag_service() -> RAGService:
    """Get singleton RAGService instance"""
    return RAGService()
