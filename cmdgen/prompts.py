"""
System prompt and prompt assembly for cmdgen.
"""

from .llm.types import Prompt
from .relevance import FilteredContext

SYSTEM_PROMPT = """You generate CLI commands. Output ONLY the raw command - no explanations, no preamble, no markdown, no code blocks, no backticks, no commentary. Just the command itself, nothing else.

Rules:
- Output ONLY the command, absolutely nothing else
- No "Here's the command:" or similar phrases
- No explanations before or after
- If multiple commands needed, chain with && or ;
- Keep it simple - prefer the most straightforward solution
- Context (current app, directory, selected text) is provided for reference - only use it if directly relevant to the request. Ignore irrelevant context.

Examples:
User: "find all js files modified in the last day"
find . -name "*.js" -mtime -1

User: "list disk usage sorted by size"
du -sh * | sort -h

User: "kill process on port 3000"
lsof -ti:3000 | xargs kill -9

User: "create a p5.js sketch with a circle"
cat > sketch.js << 'EOF'
function setup() {
  createCanvas(400, 400);
}
function draw() {
  background(220);
  circle(200, 200, 100);
}
EOF"""


def build_user_message(request_text: str, context: FilteredContext) -> str:
    """Render the request, preceded by a Context block when any field survived."""
    parts = []
    if context.foreground_app:
        parts.append(f"Current app: {context.foreground_app}")
    if context.working_directory:
        parts.append(f"Current directory: {context.working_directory}")
    if context.selected_text:
        parts.append(f"Selected text:\n{context.selected_text}")

    request_line = f"Request: {request_text}"
    if not parts:
        return request_line
    return "Context:\n" + "\n".join(parts) + "\n\n" + request_line


def assemble_prompt(request_text: str, context: FilteredContext) -> Prompt:
    """Pure: identical inputs always produce an identical Prompt."""
    return Prompt(system=SYSTEM_PROMPT, user=build_user_message(request_text, context))
