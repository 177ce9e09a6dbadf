"""
AI enrichment of captured content: titles, descriptions, tags and type-specific fields.
"""

import json
import re
from typing import Any, Dict, List, Optional

from ..core.errors import GenerationUnavailable
from .generator import IGenerationProvider, complete

_FENCED = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_BRACED = re.compile(r"\{[\s\S]*\}")
_DATA_URL = re.compile(r"^data:[^;]+;base64,")


def extract_json(response_text: str) -> Dict[str, Any]:
    """
    Parse the JSON object in a model response.

    Handles a fenced code block or a bare {...} span surrounded by prose.

    Raises:
        GenerationUnavailable: No JSON object could be parsed.
    """
    match = _FENCED.search(response_text) or _BRACED.search(response_text)
    if match:
        raw = match.group(1) if match.groups() else match.group(0)
    else:
        raw = response_text

    try:
        data = json.loads(raw.strip())
    except json.JSONDecodeError as e:
        raise GenerationUnavailable(f"Model response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise GenerationUnavailable("Model response JSON is not an object")
    return data


def _tags(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(tag).strip() for tag in value if str(tag).strip()]


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class ContentAnalyzer:
    """Asks a generation provider to describe captured content as JSON."""

    def __init__(self, provider: IGenerationProvider):
        self.provider = provider

    def _ask(self, prompt: str, operation: str, images: Optional[List[str]] = None) -> Dict[str, Any]:
        data = extract_json(complete(self.provider, prompt, images=images, operation=operation))
        return {
            "title": _text(data.get("title")),
            "description": _text(data.get("description")),
            "tags": _tags(data.get("tags")),
            "raw": data,
        }

    def analyze_image(self, image_data: str) -> Dict[str, Any]:
        """Title, description, category and any visible text of an image."""
        prompt = """Analyze this image and provide:
1. A concise title (max 60 characters)
2. A detailed description (2-3 sentences)
3. A category: choose ONE from: book, recipe, document, screenshot, other

Also, if there's any text visible in the image, extract it.

Respond in JSON format:
{
  "title": "...",
  "description": "...",
  "category": "...",
  "extractedText": "..."
}"""
        result = self._ask(prompt, "analyze_image", images=[_DATA_URL.sub("", image_data)])
        raw = result.pop("raw")
        result["category"] = _text(raw.get("category")) or "other"
        result["extracted_text"] = _text(raw.get("extractedText"))
        return result

    def analyze_text(self, text: str) -> Dict[str, Any]:
        """Title, description and tags for selected text."""
        prompt = f"""Analyze this selected text and provide:
1. A concise title that captures the main topic (max 60 characters)
2. A brief description summarizing the key points (2-3 sentences)
3. Suggested tags (3-5 relevant keywords)

Text: "{text}"

Respond in JSON format:
{{
  "title": "...",
  "description": "...",
  "tags": ["tag1", "tag2", "tag3"]
}}"""
        result = self._ask(prompt, "analyze_text")
        result.pop("raw")
        return result

    def analyze_product(self, page_content: str, product_url: str) -> Dict[str, Any]:
        prompt = f"""Extract product information from this webpage content:

{page_content}

URL: {product_url}

Provide:
1. Product name/title
2. Description (2-3 sentences highlighting key features)
3. Price (if available)
4. Currency (if available)
5. Vendor/brand name
6. Suggested tags

Respond in JSON format:
{{
  "title": "...",
  "description": "...",
  "productName": "...",
  "price": 0.00,
  "currency": "USD",
  "vendor": "...",
  "tags": ["tag1", "tag2"]
}}"""
        result = self._ask(prompt, "analyze_product")
        raw = result.pop("raw")
        result["product_name"] = _text(raw.get("productName"))
        result["vendor"] = _text(raw.get("vendor"))
        result["currency"] = _text(raw.get("currency")) or "USD"
        try:
            result["price"] = float(raw["price"]) if raw.get("price") not in (None, "") else None
        except (TypeError, ValueError):
            result["price"] = None
        return result

    def analyze_youtube(self, video_title: str, video_description: str, channel_name: str) -> Dict[str, Any]:
        prompt = f"""Analyze this YouTube video and create a better title and description for saving:

Title: {video_title}
Description: {video_description}
Channel: {channel_name}

Provide:
1. A concise, searchable title (max 60 characters)
2. A brief, informative description (2-3 sentences)
3. Suggested tags for categorization

Respond in JSON format:
{{
  "title": "...",
  "description": "...",
  "tags": ["tag1", "tag2", "tag3"]
}}"""
        result = self._ask(prompt, "analyze_youtube")
        result.pop("raw")
        return result

    def analyze_webpage(self, page_title: str, meta_description: Optional[str], url: str) -> Dict[str, Any]:
        prompt = f"""Analyze this webpage and create a title and description for bookmarking:

Page Title: {page_title}
Meta Description: {meta_description or 'N/A'}
URL: {url}

Provide:
1. A concise title (max 60 characters)
2. A useful description (2-3 sentences)
3. Suggested tags

Respond in JSON format:
{{
  "title": "...",
  "description": "...",
  "tags": ["tag1", "tag2"]
}}"""
        result = self._ask(prompt, "analyze_webpage")
        result.pop("raw")
        return result
