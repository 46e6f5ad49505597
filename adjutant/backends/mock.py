"""Fixed-latency stub backend.

Returns canned text after ``latency`` seconds.  Useful offline, in demos and
in tests; the canned blueprint goes through the same ``parse_blueprint``
path as real model output.
"""

import asyncio
import json
import logging

from adjutant.backends.base import ChatMessage, CodeGenerationParams, ModelBackend
from adjutant.backends.parsing import parse_blueprint
from adjutant.models.blueprint import ProjectBlueprint

logger = logging.getLogger(__name__)

_FOCUSLIST_BLUEPRINT: dict = {
    "meta": {
        "name": "FocusList",
        "description": "A distraction-free task manager for deep work.",
        "techStack": {
            "framework": "Next.js 15",
            "language": "TypeScript",
            "database": "PostgreSQL",
            "styling": "Tailwind CSS",
            "deployment": "Vercel",
        },
    },
    "features": [
        {
            "id": "feat-auth",
            "name": "User Authentication",
            "description": "Secure login/signup using email and password.",
            "priority": "high",
            "userStories": [
                "As a user, I want to sign up so I can save my tasks.",
                "As a user, I want to log in to access my private list.",
            ],
        },
        {
            "id": "feat-tasks",
            "name": "Task Management",
            "description": "CRUD operations for tasks.",
            "priority": "high",
            "userStories": [
                "As a user, I want to add a task.",
                "As a user, I want to mark a task as complete.",
                "As a user, I want to delete a task.",
            ],
        },
    ],
    "folderStructure": [
        {
            "name": "app",
            "type": "folder",
            "children": [
                {"name": "layout.tsx", "type": "file", "description": "Root layout with providers"},
                {"name": "page.tsx", "type": "file", "description": "Landing page / Dashboard"},
                {"name": "globals.css", "type": "file", "description": "Tailwind imports"},
            ],
        },
        {
            "name": "components",
            "type": "folder",
            "children": [
                {"name": "TaskItem.tsx", "type": "file", "description": "Individual task component"},
                {"name": "TaskList.tsx", "type": "file", "description": "List container for tasks"},
                {"name": "AddTaskForm.tsx", "type": "file", "description": "Input form for new tasks"},
            ],
        },
        {
            "name": "lib",
            "type": "folder",
            "children": [
                {"name": "db.ts", "type": "file", "description": "Database connection client"},
            ],
        },
    ],
    "databaseSchema": [
        {
            "name": "User",
            "description": "Registered application users",
            "fields": [
                {"name": "id", "type": "UUID", "required": True, "description": "Primary Key"},
                {"name": "email", "type": "VARCHAR(255)", "required": True},
                {"name": "password_hash", "type": "VARCHAR", "required": True},
                {"name": "created_at", "type": "TIMESTAMP", "required": True},
            ],
        },
        {
            "name": "Task",
            "description": "Individual todo items",
            "fields": [
                {"name": "id", "type": "UUID", "required": True, "description": "Primary Key"},
                {"name": "user_id", "type": "UUID", "required": True, "description": "Foreign Key to User"},
                {"name": "title", "type": "VARCHAR(255)", "required": True},
                {"name": "is_completed", "type": "BOOLEAN", "required": True},
                {"name": "due_date", "type": "TIMESTAMP", "required": False},
            ],
            "relationships": ["belongs to User"],
        },
    ],
    "coreComponents": [
        {
            "name": "TaskService",
            "type": "service",
            "description": "Handles business logic for task CRUD operations",
        },
        {
            "name": "useTasks",
            "type": "hook",
            "description": "React hook for fetching and managing task state",
        },
    ],
}

CANNED_BLUEPRINT_JSON = json.dumps(_FOCUSLIST_BLUEPRINT, indent=2)

_REQUIREMENTS_DOC = """# Product Requirements Document

## 1. Executive Summary
[Mock] A concise summary of the product derived from the conversation.

## 2. Problem Statement
[Mock] The problem the product solves.

## 3. User Personas
- [Mock] Primary user

## 4. User Stories & Functional Requirements
- As a user, I want to capture an idea so that I can build on it later.
"""

_DESIGN_DOC = """# Design & UX Specifications

## 1. High-Level Design Requirements (Design Brief)
[Mock] Clean, minimal interface.

## 2. User Stories & Functional Specs
- As a user, I want to see my items so that I know what is next.

## 3. Information Architecture (IA) & Sitemap
- Home
  - Dashboard

## 4. Critical User Flows
1. [Mock] Open app -> Dashboard -> Add item -> Item listed
"""


class MockBackend(ModelBackend):
    """Stub backend with a fixed per-call latency."""

    name = "mock"

    def __init__(self, latency: float = 1.0) -> None:
        self.latency = latency

    async def _wait(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def chat(self, history: list[ChatMessage]) -> str:
        await self._wait()
        last_user = next((m for m in reversed(history) if m.role == "user"), None)
        received = last_user.content if last_user else "unknown"
        return (
            "[Mock AI Response]: I understand you want to build something. "
            f'I received: "{received}".'
        )

    async def generate_blueprint(self, requirements: str) -> ProjectBlueprint:
        logger.info("mock  blueprint  requirements=%.50s", requirements)
        await self._wait()
        return parse_blueprint(CANNED_BLUEPRINT_JSON)

    async def generate_requirements_doc(self, context: str) -> str:
        await self._wait()
        return _REQUIREMENTS_DOC

    async def generate_design_specs(self, context: str) -> str:
        await self._wait()
        return _DESIGN_DOC

    async def generate_code(self, params: CodeGenerationParams) -> str:
        await self._wait()
        tech_stack = json.dumps(params.blueprint.meta.tech_stack.model_dump(by_alias=True), indent=2)
        return (
            "// [Mock Generated Code]\n"
            f"// File: {params.file_path}\n"
            f"// Description: {params.description}\n"
            "\n"
            "import React from 'react';\n"
            "\n"
            "export default function MockComponent() {\n"
            "  return (\n"
            '    <div className="p-4 border rounded">\n'
            "      <h1>Mock Implementation</h1>\n"
            f"      <pre>{tech_stack}</pre>\n"
            "    </div>\n"
            "  );\n"
            "}\n"
        )
