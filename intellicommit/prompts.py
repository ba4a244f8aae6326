"""Prompt text shared by the provider drivers."""

from __future__ import annotations

from .analysis import DiffAnalysis

# Key-less models get a short prompt; they echo and ramble on long input.
FREE_MODEL_DIFF_CHARS = 500


def build_prompt(diff: str, analysis: DiffAnalysis) -> str:
    """Construct the instruction prompt sent to chat-style providers."""
    prompt_parts = [
        "You are an expert programmer. Generate a conventional commit message "
        "for this git diff.",
        "",
        f"File: {analysis.file_name}",
        f"Change Type: {analysis.change_type.value}",
        f"Complexity: {analysis.complexity.value}",
        "",
        "Git Diff:",
        diff,
        "",
        "Requirements:",
        "1. Use conventional commit format (type: description)",
        "2. Keep subject line under 50 characters",
        "3. Add body explaining what and why",
        "4. Be specific and professional",
        "",
        "Commit Message:",
    ]
    return "\n".join(prompt_parts)


def build_completion_prompt(diff: str) -> str:
    """Prompt for text-completion models (Hugging Face inference)."""
    return "\n".join(
        [
            "Generate a conventional commit message for this git diff:",
            "",
            diff,
            "",
            "Format: type: short description",
            "",
            "Body:",
            "- What changed",
            "- Why it changed",
            "",
            "Commit message:",
        ]
    )


def build_free_prompt(diff: str) -> str:
    return f"Generate commit message for: {diff[:FREE_MODEL_DIFF_CHARS]}"
