"""Prompt builders."""

from __future__ import annotations

from typing import Dict, List

from .models import GenerationRequest

WEB_TECHNOLOGY_MARKERS = (
    "web",
    "html",
    "css",
    "javascript",
    "typescript",
    "react",
    "vue",
    "angular",
    "svelte",
    "next",
    "nuxt",
    "tailwind",
    "jquery",
    "frontend",
)

SYSTEM_PROMPT = (
    "You are an expert software engineer. You answer with complete source files, "
    "each in its own fenced code block, and nothing is left as a placeholder."
)


def is_web_technology(technology: str) -> bool:
    lowered = technology.lower()
    return any(marker in lowered for marker in WEB_TECHNOLOGY_MARKERS)


def _features_section(features: List[str]) -> str:
    if not features:
        return ""
    bullets = "\n".join(f"- {feature}" for feature in features)
    return f"Important features to include:\n{bullets}\n\n"


def _guidelines(technology: str) -> str:
    lines = [
        "1. Put each logical unit (component, module, stylesheet, config) in its own file.",
        f"2. Name files the way {technology} projects usually do and include every file the application needs.",
        "3. Put the filename in the header of each code block, immediately before its contents, "
        "e.g. ```jsx filename=src/App.jsx",
        "4. Write complete, working implementations. Do not leave stubs, placeholders or TODOs.",
        "5. Use modern coding standards and best practices.",
    ]
    if is_web_technology(technology):
        lines.append(
            "6. Every HTML file must be a complete, valid document with a <!DOCTYPE html> declaration "
            "and proper <head> and <body> sections."
        )
    return "\n".join(lines)


def build_generation_prompt(request: GenerationRequest, provider: str | None = None) -> str:
    closing = "Return multiple code files that together form a complete solution."
    if provider == "huggingface":
        # Hosted instruct models get no system message, so the role goes here.
        closing = f"{SYSTEM_PROMPT}\n{closing}"
    return (
        f"You are a senior developer specializing in {request.technology}.\n"
        f"Create a complete {request.app_type} based on the following description.\n\n"
        f"User Requirements:\n{request.prompt}\n\n"
        f"{_features_section(request.features)}"
        "Please follow these guidelines:\n"
        f"{_guidelines(request.technology)}\n\n"
        f"{closing}"
    )


def build_messages(prompt: str, provider: str) -> List[Dict[str, str]]:
    if provider == "deepseek":
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
    return [{"role": "user", "content": prompt}]
