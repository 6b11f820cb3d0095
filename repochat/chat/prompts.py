"""
Prompt Templates

System prompts that ground answers in a project's assembled context.
"""

from repochat.projects.models import ContextBundle, ProjectDescriptor

SYSTEM_PROMPT_TEMPLATE = """You are an AI assistant that helps developers understand their codebase and projects.

You have full access to the {name} project, including its source files and configuration:
{context}

Answer clearly and technically using project context. Include code snippets when helpful, reference specific files, line numbers or functions, and keep explanations concise.

Current project: {name}
Files loaded: {file_count} files ({size_kb}KB)
Last updated: {loaded_at}"""

# (step name, instruction) pairs for the multi-step error check
ERROR_CHECK_STEPS = (
    (
        "Code Analysis",
        "Analyze this code for potential issues: {code}\n\nContext: {context}\n\n"
        "Identify potential issue categories and areas of concern.",
    ),
    (
        "Syntax & Logic Check",
        "Check for syntax and logic errors in: {code}\n\nContext: {context}\n\n"
        "Focus on syntax, logic flow, and common mistakes.",
    ),
    (
        "Best Practices",
        "Review best practices for: {code}\n\nContext: {context}\n\n"
        "Check against coding standards and best practices.",
    ),
    (
        "Edge Cases & Issues",
        "Identify edge cases and potential issues for: {code}\n\nContext: {context}\n\n"
        "Focus on specific problems and potential pitfalls.",
    ),
)

ERROR_REPORT_TEMPLATE = """Based on the multi-step analysis, provide a comprehensive error report for: {code}

Analysis Results:
{results}

Context from codebase: {context}

Provide a clear, actionable error report focusing on specific issues found and how to fix them."""


def build_system_prompt(project: ProjectDescriptor, bundle: ContextBundle) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(
        name=project.name,
        context=bundle.context,
        file_count=bundle.file_count,
        size_kb=bundle.total_size_kb,
        loaded_at=bundle.loaded_at.isoformat(),
    )


def build_error_report_prompt(code: str, context: str, results: list[tuple[str, str]]) -> str:
    return ERROR_REPORT_TEMPLATE.format(
        code=code,
        context=context,
        results="\n\n".join(f"{step}: {analysis}" for step, analysis in results),
    )
