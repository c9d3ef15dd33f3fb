"""
Tool definitions offered to the chat model and artifact parsing
"""
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


class Artifact(BaseModel):
    """Structured result rendered by the chat UI"""
    type: str
    title: str
    data: Dict[str, Any]


CV_AGENT_TOOL = {
    "type": "function",
    "function": {
        "name": "generate_tailored_cv",
        "description": (
            "Analyze a job description against the owner's profile and generate a match analysis, "
            "tailored CV, and cover letter. Use this tool when a user pastes a job description or asks about job fit."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "overall_score": {"type": "number", "description": "Overall match score 0-100"},
                "summary": {"type": "string", "description": "One-line summary of the match"},
                "match_analysis": {
                    "type": "array",
                    "description": "Detailed skill-by-skill match analysis",
                    "items": {
                        "type": "object",
                        "properties": {
                            "skill": {"type": "string"},
                            "required_level": {"type": "number"},
                            "owner_level": {"type": "number"},
                            "category": {"type": "string"},
                        },
                        "required": ["skill", "required_level", "owner_level", "category"],
                    },
                },
                "tailored_cv": {"type": "string", "description": "A tailored CV in markdown format"},
                "cover_letter": {"type": "string", "description": "A professional cover letter in markdown format"},
            },
            "required": ["overall_score", "summary", "match_analysis", "tailored_cv", "cover_letter"],
        },
    },
}

PORTFOLIO_TOOL = {
    "type": "function",
    "function": {
        "name": "generate_portfolio",
        "description": (
            "Generate a curated portfolio summary based on a specific theme, technology, or audience. "
            "Use when a user asks to see relevant work or wants a curated selection of projects."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Portfolio title"},
                "summary": {"type": "string", "description": "Brief intro paragraph"},
                "projects": {
                    "type": "array",
                    "description": "Curated list of relevant projects",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "description": {"type": "string"},
                            "tech_stack": {"type": "array", "items": {"type": "string"}},
                            "highlights": {"type": "array", "items": {"type": "string"}},
                            "url": {"type": "string"},
                        },
                        "required": ["name", "description", "tech_stack", "highlights"],
                    },
                },
                "skills_highlight": {
                    "type": "array",
                    "description": "Top skills demonstrated across projects",
                    "items": {
                        "type": "object",
                        "properties": {
                            "skill": {"type": "string"},
                            "proficiency": {"type": "number", "description": "0-100"},
                        },
                        "required": ["skill", "proficiency"],
                    },
                },
            },
            "required": ["title", "summary", "projects", "skills_highlight"],
        },
    },
}

PROJECT_DEEP_DIVE_TOOL = {
    "type": "function",
    "function": {
        "name": "project_deep_dive",
        "description": (
            "Provide a comprehensive deep-dive into a specific project. Use when a user asks for "
            "details about a particular project or says 'tell me more about X'."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "project_name": {"type": "string"},
                "tagline": {"type": "string", "description": "One-line project summary"},
                "problem": {"type": "string", "description": "The problem this project solves"},
                "solution": {"type": "string", "description": "How it solves it (markdown)"},
                "tech_stack": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "role": {"type": "string", "description": "What this tech is used for"},
                        },
                        "required": ["name", "role"],
                    },
                },
                "key_features": {"type": "array", "items": {"type": "string"}, "description": "3-5 notable features"},
                "learnings": {"type": "string", "description": "Key technical learnings (markdown)"},
                "url": {"type": "string"},
            },
            "required": ["project_name", "tagline", "problem", "solution", "tech_stack", "key_features"],
        },
    },
}

AVAILABILITY_TOOL = {
    "type": "function",
    "function": {
        "name": "check_availability",
        "description": (
            "Check the owner's availability for projects, consulting, or collaboration. "
            "Use when a user asks about availability, booking, hiring, or scheduling."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "enum": ["available", "limited", "unavailable"]},
                "summary": {"type": "string", "description": "Brief availability summary"},
                "engagement_types": {
                    "type": "array",
                    "description": "Types of work the owner is open to",
                    "items": {
                        "type": "object",
                        "properties": {
                            "type": {"type": "string"},
                            "available": {"type": "boolean"},
                            "details": {"type": "string"},
                        },
                        "required": ["type", "available", "details"],
                    },
                },
                "preferred_contact": {"type": "string"},
                "next_steps": {"type": "string", "description": "Suggested next steps (markdown)"},
            },
            "required": ["status", "summary", "engagement_types", "preferred_contact", "next_steps"],
        },
    },
}

ALL_TOOLS: Dict[str, Dict[str, Any]] = {
    "generate_tailored_cv": CV_AGENT_TOOL,
    "generate_portfolio": PORTFOLIO_TOOL,
    "project_deep_dive": PROJECT_DEEP_DIVE_TOOL,
    "check_availability": AVAILABILITY_TOOL,
}

TOOL_DESCRIPTIONS: Dict[str, str] = {
    "generate_tailored_cv": (
        "**generate_tailored_cv**: When a user pastes a job description or asks about job fit, use this "
        "to analyze the match, generate a tailored CV, and write a cover letter."
    ),
    "generate_portfolio": (
        "**generate_portfolio**: When a user asks to see relevant work, create a curated portfolio, "
        "or wants projects filtered by theme/technology/audience."
    ),
    "project_deep_dive": (
        "**project_deep_dive**: When a user asks for details about a specific project, wants to "
        "understand technical decisions, or says 'tell me more about X'."
    ),
    "check_availability": (
        "**check_availability**: When a user asks about availability, hiring, booking, consulting, or scheduling."
    ),
}

# tool name -> (artifact type, title argument, fallback title)
ARTIFACT_TYPES: Dict[str, tuple[str, Optional[str], str]] = {
    "generate_tailored_cv": ("cv-match", None, "CV Match Analysis"),
    "generate_portfolio": ("portfolio", "title", "Curated Portfolio"),
    "project_deep_dive": ("project-deep-dive", "project_name", "Project Deep Dive"),
    "check_availability": ("availability", None, "Availability"),
}


def get_active_tools(enabled_tools: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    """Tools for the enabled ids (all tools when none are given)"""
    if not enabled_tools:
        return list(ALL_TOOLS.values())
    return [ALL_TOOLS[name] for name in enabled_tools if name in ALL_TOOLS]


def get_tool_instructions(enabled_tools: Optional[List[str]] = None) -> str:
    """System prompt section describing when to use each active tool"""
    if enabled_tools:
        names = [name for name in TOOL_DESCRIPTIONS if name in enabled_tools]
    else:
        names = list(TOOL_DESCRIPTIONS)
    if not names:
        return ""

    lines = "\n".join(f"{i}. {TOOL_DESCRIPTIONS[name]}" for i, name in enumerate(names, start=1))
    return (
        "\n\n## Tool Instructions\nYou have several tools available. Use them appropriately:\n\n"
        f"{lines}\n\nAlways base your analysis on the actual profile data. "
        "Be honest about gaps while highlighting strengths."
    )


def parse_tool_call(tool_call: Dict[str, Any]) -> Optional[Artifact]:
    """
    Turn one model tool call into an artifact.

    Returns None for unknown tools or arguments that are not valid JSON.
    """
    function = tool_call.get("function") or {}
    name = function.get("name")
    if not name or name not in ARTIFACT_TYPES:
        return None

    try:
        args = json.loads(function.get("arguments") or "{}")
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse tool call {name}: {e}")
        return None
    if not isinstance(args, dict):
        return None

    artifact_type, title_key, fallback = ARTIFACT_TYPES[name]
    title = (args.get(title_key) if title_key else None) or fallback
    return Artifact(type=artifact_type, title=title, data=args)
