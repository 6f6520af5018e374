"""
Fixed texts for the Hyperbeam assistant.

Uppercase string constants in this module are exposed to every prompt
template as Jinja2 globals.
"""

ASSISTANT_NAME = "Hyperbeam AI"
ENGINE_NAME = "Hyperbeam"
PREFERRED_LANGUAGE = "GDScript"
SECONDARY_LANGUAGE = "C#"

CURSOR_MARKER = "[CURSOR]"

# --- Conversation texts shown to the user ---

WELCOME_MESSAGE = """Welcome to Hyperbeam AI Assistant!

I'm here to help with your game development. Ask me about:
- GDScript and C# coding
- Game design patterns
- Godot-specific features
- Debugging help
- Performance optimization

Type your question below!"""

THINKING_PLACEHOLDER = "Thinking..."

MISSING_CREDENTIALS_MESSAGE = """Please set your AI API key in the editor settings to use this feature.

Go to Editor > Editor Settings > AI Assistant and add your API key."""

BACKEND_FAILURE_MESSAGE = """Sorry, I couldn't get an answer from the AI service this time.

Check your network connection and API settings, then send your message again."""

TIMEOUT_FAILURE_MESSAGE = """The AI service took too long to answer, so the request was cancelled.

Please send your message again."""

SESSION_CLOSED_MESSAGE = "The assistant was closed before this request finished."
