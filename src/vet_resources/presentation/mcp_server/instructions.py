"""
MCP Server Instructions - usage guide for AI agents.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
Veteran Resources MCP Server - find health and support resources for veterans

═══════════════════════════════════════════════════════════════════════════════
WHICH TOOL
═══════════════════════════════════════════════════════════════════════════════

1. The user describes how they feel ("I can't sleep", "I'm in crisis")
   → recommend_resources(category, symptoms, severity)
     category: mental | physical | life | crisis
     severity: mild | moderate | severe | crisis

2. The user asks for something specific ("housing help in Texas")
   → search_resources(query="housing", state="TX")

3. Details for one result → get_resource(resource_id)

4. What kinds of resources exist → resource_category_counts()

═══════════════════════════════════════════════════════════════════════════════
NOTES
═══════════════════════════════════════════════════════════════════════════════

- If the user mentions suicidal thoughts or immediate danger, always surface
  the Veterans Crisis Line: dial 988 then press 1, or text 838255.
- search_resources with a state also returns national resources; use
  state="national" for national resources only.
- Pass the same selection_hash / session_id to keep orderings stable across
  follow-up calls.
- Empty results come with a "message" field; relay it instead of guessing.
"""
