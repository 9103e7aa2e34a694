"""
AI-powered code migration service using the OpenAI chat completions API
Translates source files, analyzes translations and writes tests
"""
import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError
from config import get_settings, Settings
from services.errors import AIServiceError

logger = logging.getLogger(__name__)


def _with_version(language: str, version: Optional[str]) -> str:
    return f"{language} {version}" if version else language


def parse_json_object(response_text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object returned by the model

    Returns:
        The decoded dict, or None if the text is not a JSON object
    """
    try:
        data = json.loads(response_text or "")
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"Failed to parse AI response as JSON: {e}")
        logger.debug(f"Response was: {(response_text or '')[:500]}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"AI response is JSON but not an object: {type(data).__name__}")
        return None
    return data


class MigrationAIService:
    """Wraps every call made to the external text-generation service"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or get_settings()
        self.model = self.settings.openai_model
        self.client = client
        if self.client is None and self.settings.openai_api_key:
            self.client = AsyncOpenAI(api_key=self.settings.openai_api_key)

        if self.enabled:
            logger.info(f"AI migration enabled with model: {self.model}")
        else:
            logger.warning("AI migration disabled: OPENAI_API_KEY is not set")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def _complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> str:
        """Send one chat completion request and return the message text"""
        if not self.enabled:
            raise AIServiceError("OpenAI API key is not configured")

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens:
            request["max_tokens"] = max_tokens
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**request)
        except OpenAIError as e:
            raise AIServiceError(str(e) or e.__class__.__name__, cause=e) from e

        return response.choices[0].message.content or ""

    async def translate(
        self,
        code: str,
        source_language: str,
        target_language: str,
        source_version: Optional[str] = None,
        target_version: Optional[str] = None,
        file_path: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> str:
        """
        Translate source code into the target language

        The model's reply is returned verbatim as the translated code.

        Args:
            code: Original source text
            source_language: Source language/framework name
            target_language: Target language/framework name
            source_version: Optional source version
            target_version: Optional target version
            file_path: Optional path hint for project-level context
            file_name: Optional name hint for project-level context

        Returns:
            Translated code

        Raises:
            AIServiceError: on transport or service failure
        """
        messages = [
            {
                "role": "system",
                "content": self._get_translation_prompt(
                    source_language, target_language,
                    source_version, target_version,
                    file_path, file_name,
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Please migrate this {_with_version(source_language, source_version)} code to "
                    f"{_with_version(target_language, target_version)}:\n\n{code}"
                ),
            },
        ]
        return await self._complete(
            messages,
            temperature=self.settings.translation_temperature,
            max_tokens=self.settings.translation_max_tokens,
        )

    async def analyze_migration(
        self,
        source_code: str,
        target_code: str,
        source_language: str,
        target_language: str,
    ) -> Dict[str, Any]:
        """
        Ask for a structured review of a single translation

        Returns:
            Parsed JSON payload; an empty dict when the reply is not valid JSON

        Raises:
            AIServiceError: on transport or service failure
        """
        messages = [
            {
                "role": "system",
                "content": (
                    f"You are an expert code reviewer specializing in analyzing code migrations from "
                    f"{source_language} to {target_language}. Analyze the source and target code to identify "
                    "key changes, performance implications, and business logic preservation. "
                    "Respond with a detailed analysis in JSON format."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Source ({source_language}):\n{source_code}\n\n"
                    f"Target ({target_language}):\n{target_code}\n\n"
                    "Provide a detailed analysis as a JSON object with these keys:\n"
                    "- key_changes: array of {category, description, severity} where severity is "
                    "info, warning or critical\n"
                    "- performance_metrics: object mapping metric name to {score (0-100), description}\n"
                    "- business_logic_preservation: object mapping category to {score (0-100), details}\n"
                    "- generated_tests: string with example tests\n"
                    "- security_issues: array of strings\n"
                    "- optimization_suggestions: array of strings"
                ),
            },
        ]
        response_text = await self._complete(
            messages,
            temperature=self.settings.analysis_temperature,
            json_mode=True,
        )
        return parse_json_object(response_text) or {}

    async def generate_tests(
        self,
        source_code: str,
        target_code: str,
        source_language: str,
        target_language: str,
    ) -> str:
        """
        Generate unit tests checking that the migrated code preserves behavior

        Raises:
            AIServiceError: on transport or service failure
        """
        messages = [
            {
                "role": "system",
                "content": (
                    f"You are an expert in writing tests for {target_language} code. Generate comprehensive "
                    "unit tests for the provided code that validate all the key functionality and edge cases. "
                    "Focus on ensuring that the business logic from the original code is preserved in the "
                    "migrated code. Return only the test code."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Original {source_language} code:\n{source_code}\n\n"
                    f"Migrated {target_language} code:\n{target_code}\n\n"
                    "Generate unit tests that validate the migrated code preserves the functionality "
                    "of the original code."
                ),
            },
        ]
        return await self._complete(messages, temperature=self.settings.analysis_temperature)

    async def summarize_project(
        self,
        project_info: Dict[str, Any],
        sample_files: List[Dict[str, str]],
        source_language: str,
        target_language: str,
    ) -> str:
        """
        Request a project-level migration report

        Returns:
            Raw reply text (expected to be a JSON object, not guaranteed)

        Raises:
            AIServiceError: on transport or service failure
        """
        messages = [
            {
                "role": "system",
                "content": self._get_summary_prompt(source_language, target_language),
            },
            {
                "role": "user",
                "content": json.dumps({
                    "project_info": project_info,
                    "sample_files": sample_files,
                }),
            },
        ]
        return await self._complete(
            messages,
            temperature=self.settings.summary_temperature,
            json_mode=True,
        )

    def _get_translation_prompt(
        self,
        source_language: str,
        target_language: str,
        source_version: Optional[str],
        target_version: Optional[str],
        file_path: Optional[str],
        file_name: Optional[str],
    ) -> str:
        """System prompt for a translation request"""
        prompt = (
            "You are an Intelligent Code Migration Agent specializing in migrating code from "
            f"{source_language} to {target_language} while preserving business logic and functionality.\n"
        )

        if file_path or file_name:
            prompt += f"""
This file is part of a larger project with the following context:
- Source Language: {_with_version(source_language, source_version)}
- Target Language: {_with_version(target_language, target_version)}
- File Path: {file_path or file_name}
- File Name: {file_name or file_path}
"""

        prompt += """
Your task is to translate this source code accurately while:
1. Preserving all business logic and functionality
2. Using appropriate idioms, patterns, and best practices for the target language
3. Maintaining imports, dependencies, and module structures appropriately
4. Keeping comments and documentation (translate them if needed)
5. Following correct naming conventions for the target language

Return only the migrated code without explanations."""
        return prompt

    def _get_summary_prompt(self, source_language: str, target_language: str) -> str:
        """System prompt for the project-level report"""
        return f"""You are an expert in code migration and analysis. Analyze this project migration from {source_language} to {target_language}.

Generate a comprehensive analysis with the following sections:
1. project_overview - High-level description of what the project appears to do
2. migration_complexity - Assessment of how complex this migration is (Simple/Moderate/Complex)
3. key_challenges - Major challenges in migrating this codebase
4. recommended_changes - Recommended architectural or structural changes for the target language
5. dependencies - List of likely dependencies needed in the target language
6. testing_strategy - Recommended approach for testing the migrated code

Respond in JSON format with these sections as keys."""
