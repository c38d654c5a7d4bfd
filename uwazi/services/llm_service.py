"""
LLM service for document classification and fact extraction via OpenRouter
"""
import asyncio
import base64
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import settings
from ..exceptions import ClassificationError, ExtractionError
from ..models import DocumentType, IdentificationResult, SchemaField, UploadedFile
from .intake_service import CLASSIFICATION_FAILED_SUMMARY
from .pdf_service import pdf_service

logger = logging.getLogger(__name__)

# Hints steering the classifier between look-alike documents
DOCUMENT_HINTS = {
    DocumentType.TRANSCRIPT: "Should contain course names, grades, and GPA.",
    DocumentType.NATIONAL_ID: "A government-issued photo ID with a name and date of birth.",
    DocumentType.INCOME_STATEMENT: (
        'Look for terms like "pay stub," "earnings statement," "W-2," or tax forms. It must contain '
        "detailed financial data like gross pay, taxes, and deductions. A simple bank statement is "
        "NOT an income statement."
    ),
    DocumentType.LEASE_AGREEMENT: (
        "A formal contract for renting property, mentioning landlord, tenant, rent amount, and lease term."
    ),
    DocumentType.CV: "A resume listing education, work history and skills.",
    DocumentType.BUSINESS_PLAN: "Describes a business idea, market, financial projections and strategy.",
    DocumentType.INCORPORATION_CERTIFICATE: "An official registry certificate showing a company name and incorporation date.",
    DocumentType.LETTER_OF_RECOMMENDATION: "A signed letter from a referee vouching for the applicant.",
    DocumentType.PROOF_OF_LEADERSHIP: "Certificates or letters describing leadership roles held by the applicant.",
    DocumentType.ESSAY: "A personal statement or essay written by the applicant.",
}

EXTRACTION_INSTRUCTIONS = """You are an expert data extraction AI. Analyze the following documents and extract the information requested in the provided JSON schema. Pay close attention to formatting requirements (like YYYY-MM-DD for dates). If a piece of information cannot be found in any of the documents, return null for that field.
IMPORTANT: For financial data like 'monthlyIncome', if only weekly or bi-weekly pay is listed, calculate the monthly equivalent (assume 4.33 weeks per month). For 'householdSize', look for this information on tax forms if available.

Respond with a single JSON object whose keys are exactly the schema fields.

SCHEMA:
{schema}"""


class LLMService:
    """Document classifier and fact extractor backed by the OpenRouter API"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.api_key = settings.openrouter_api_key
        self.base_url = settings.openrouter_base_url
        self.model = settings.openrouter_model

        if not self.api_key:
            logger.warning("OPENROUTER_API_KEY is not set; document analysis calls will fail")

        # HTTP client with timeout
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.llm_timeout_seconds),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "X-Title": "Uwazi Proofs"
            }
        )

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def _document_part(self, file: UploadedFile) -> Dict[str, Any]:
        """Render a file as a chat message content part"""
        if file.mime_type == "application/pdf":
            # PDF parsing is CPU-bound; keep it off the event loop
            text = await asyncio.to_thread(pdf_service.extract_text, file.content)
            return {"type": "text", "text": text or "(no extractable text)"}

        encoded = base64.b64encode(file.content).decode("utf-8")
        return {
            "type": "image_url",
            "image_url": {"url": f"data:{file.mime_type};base64,{encoded}"}
        }

    async def _complete(self, parts: List[Dict[str, Any]]) -> str:
        """Send one user message and return the assistant content"""
        if not self.api_key:
            raise RuntimeError("OPENROUTER_API_KEY is not configured")

        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": parts}],
            "temperature": 0.1,  # Low temperature for consistent output
            "max_tokens": 2000,
            "response_format": {"type": "json_object"}
        }

        logger.info(f"Sending request to OpenRouter API with model: {self.model}")
        response = await self.client.post(f"{self.base_url}/chat/completions", json=payload)

        if response.status_code != 200:
            raise RuntimeError(f"OpenRouter API error: {response.status_code} - {response.text}")

        response_data = response.json()
        if not response_data.get("choices"):
            raise RuntimeError("No choices in OpenRouter response")
        return response_data["choices"][0]["message"]["content"] or ""

    async def classify(self, content: bytes, mime_type: str,
                       candidate_types: Optional[Sequence[DocumentType]] = None) -> IdentificationResult:
        """
        Identify the type of a document

        Never raises: failures are reported as an UNKNOWN classification.
        """
        file = UploadedFile(filename="document", mime_type=mime_type, content=content)
        types = [t for t in (candidate_types or list(DocumentType)) if t != DocumentType.UNKNOWN]
        names = ", ".join(t.value for t in types)
        hints = "\n".join(f"- {t.value}: {DOCUMENT_HINTS[t]}" for t in types if t in DOCUMENT_HINTS)

        prompt = (
            "You are an expert document classifier. Analyze the provided document and identify its type.\n"
            f"The possible types are: {names}.\n"
            f"Here are some hints:\n{hints}\n\n"
            "If the document does not clearly match one of these, classify it as UNKNOWN. Also provide a "
            "brief, one-sentence summary of the document's content. Respond in JSON format: "
            '{"documentType": "<type>", "summary": "<summary>"}'
        )

        try:
            raw = await self._complete([await self._document_part(file), {"type": "text", "text": prompt}])
            parsed = self._extract_json_from_response(raw)
            if parsed is None:
                raise ClassificationError("Classifier response was not valid JSON")
        except httpx.TimeoutException:
            logger.error("OpenRouter API request timed out during classification")
            return IdentificationResult(type=DocumentType.UNKNOWN, summary=CLASSIFICATION_FAILED_SUMMARY)
        except Exception as e:
            logger.error(f"Error identifying document type: {e}")
            return IdentificationResult(type=DocumentType.UNKNOWN, summary=CLASSIFICATION_FAILED_SUMMARY)

        doc_type = DocumentType.parse(parsed.get("documentType"))
        summary = str(parsed.get("summary") or "")
        if doc_type != DocumentType.UNKNOWN and doc_type not in types:
            logger.warning(f"Classifier returned unexpected type {doc_type.value}")
            doc_type = DocumentType.UNKNOWN
        if doc_type == DocumentType.UNKNOWN and not summary:
            summary = "Could not determine document type."
        return IdentificationResult(type=doc_type, summary=summary)

    async def extract(self, files_by_type: Dict[DocumentType, UploadedFile],
                      schema: Dict[str, SchemaField]) -> Dict[str, Any]:
        """
        Extract structured facts from a set of documents

        Raises:
            ExtractionError: if the service fails or returns unusable output
        """
        schema_json = json.dumps(
            {name: field.model_dump(mode="json") for name, field in schema.items()},
            indent=2
        )
        parts: List[Dict[str, Any]] = [
            {"type": "text", "text": EXTRACTION_INSTRUCTIONS.format(schema=schema_json)}
        ]

        try:
            for doc_type, file in files_by_type.items():
                parts.append({"type": "text", "text": f"\n--- START OF DOCUMENT: {doc_type.value} ---"})
                parts.append(await self._document_part(file))
                parts.append({"type": "text", "text": f"--- END OF DOCUMENT: {doc_type.value} ---"})

            raw = await self._complete(parts)
        except httpx.TimeoutException:
            raise ExtractionError("Document analysis timed out. Please try again.", status_code=408)
        except Exception as e:
            logger.error(f"Error extracting data from documents: {e}")
            raise ExtractionError(
                "Failed to extract data. Documents might be unclear or missing key information."
            ) from e

        extracted = self._extract_json_from_response(raw)
        if extracted is None:
            logger.warning("Failed to extract valid JSON from LLM response")
            raise ExtractionError(
                "Failed to extract data. Documents might be unclear or missing key information."
            )
        return extracted

    def _extract_json_from_response(self, content: str) -> Optional[Dict[str, Any]]:
        """
        Extract a JSON object from LLM response content

        Returns:
            Parsed JSON dict or None if extraction fails
        """
        json_match = None

        # Pattern 1: ```json ... ```
        json_block_match = re.search(r'```json\s*(.*?)\s*```', content, re.DOTALL)
        if json_block_match:
            json_match = json_block_match.group(1)

        # Pattern 2: ``` ... ``` (without json specifier)
        if not json_match:
            block_match = re.search(r'```\s*(.*?)\s*```', content, re.DOTALL)
            if block_match:
                json_match = block_match.group(1)

        # Pattern 3: Look for content that starts with { and ends with }
        if not json_match:
            brace_match = re.search(r'(\{.*\})', content, re.DOTALL)
            if brace_match:
                json_match = brace_match.group(1)

        if not json_match:
            logger.warning("No JSON content found in LLM response")
            return None

        try:
            parsed_json = json.loads(json_match.strip())
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse extracted JSON: {e}")
            return None

        if not isinstance(parsed_json, dict):
            logger.warning("Extracted JSON is not an object")
            return None
        return parsed_json


# Global LLM service instance
llm_service = LLMService()
