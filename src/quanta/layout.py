"""Layout builders: the Dash component tree and the message projection."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import dash_bootstrap_components as dbc
from dash import dcc, html
from dash.development.base_component import Component as DashComponent

from .markdown import render
from .models import USER_ROLE, ChatMessage

REQUIRED_IDS = {
    "url_location",
    "messages_container",
    "input_textarea",
    "submit_button",
    "typing_indicator",
    "new_conversation_button",
    "char_count",
    "pending_prompt",
}

SUGGESTED_PROMPTS: Dict[str, str] = {
    "Write copy": "Write a short product blurb for a smart water bottle.",
    "Image generation": "Give me 5 creative prompts to generate a tech-themed hero image.",
    "Create avatar": "Design a playful avatar concept for a coding assistant.",
    "Write code": "Generate a minimal HTML/CSS/JS layout for a pricing page.",
}
FALLBACK_PROMPT = "Tell me something interesting about UI design."


class Layout(ABC):
    """Interface for building the Dash component layout.

    Implementations must include every id in ``REQUIRED_IDS``; the callbacks
    are wired to them.
    """

    suggestions: Dict[str, str] = SUGGESTED_PROMPTS
    max_chars: int = 3000

    @abstractmethod
    def build_layout(self) -> DashComponent:
        """Constructs and returns the entire Dash component tree for the UI."""
        pass

    @abstractmethod
    def build_messages(self, messages: List[ChatMessage]) -> List[DashComponent]:
        """Projects a message sequence to renderable components."""
        pass

    def get_external_stylesheets(self) -> List:
        return []

    def get_external_scripts(self) -> List:
        return []

    def suggested_prompt(self, label: Optional[str]) -> str:
        return self.suggestions.get(label, FALLBACK_PROMPT)

    def char_count(self, text: Optional[str]) -> str:
        return f"{len(text or ''):,}/{self.max_chars:,}"


class Bootstrap(Layout):
    """The default chat layout, styled with dash-bootstrap-components."""

    def __init__(self, title: str = "Quanta AI", max_chars: int = 3000):
        self.title = title
        self.max_chars = max_chars

    def get_external_stylesheets(self) -> List:
        return [dbc.themes.BOOTSTRAP, dbc.icons.BOOTSTRAP]

    def build_layout(self) -> DashComponent:
        """Constructs the main layout Div."""
        return html.Div(
            className="d-flex flex-column vh-100",
            children=[
                dcc.Location(id="url_location", refresh=False),
                dcc.Store(id="pending_prompt"),
                self.build_header(),
                self.build_suggestions(),
                self.build_chat_area(),
                self.build_input_area(),
            ],
        )

    def build_header(self) -> DashComponent:
        return html.Header(
            className="p-2 bg-light border-bottom",
            children=[
                dbc.Container(
                    fluid=True,
                    children=[
                        dbc.Row(
                            align="center",
                            children=[
                                dbc.Col(html.H4(self.title, className="m-0")),
                                dbc.Col(
                                    dbc.Button(
                                        [html.I(className="bi bi-plus-lg me-1"), "New chat"],
                                        id="new_conversation_button",
                                        color="primary",
                                        outline=True,
                                        n_clicks=0,
                                    ),
                                    width="auto",
                                ),
                            ],
                        )
                    ],
                )
            ],
        )

    def build_suggestions(self) -> DashComponent:
        return html.Div(
            className="d-flex flex-wrap gap-2 p-2",
            children=[
                dbc.Button(
                    label,
                    id={"type": "suggestion", "index": label},
                    color="secondary",
                    outline=True,
                    size="sm",
                    n_clicks=0,
                )
                for label in self.suggestions
            ],
        )

    def build_chat_area(self) -> DashComponent:
        return html.Main(
            className="flex-grow-1 p-3",
            style={"overflowY": "auto"},
            children=[
                html.Div(id="messages_container"),
                html.Div(
                    "Quanta is typing...",
                    id="typing_indicator",
                    className="text-muted fst-italic",
                    hidden=True,
                ),
            ],
        )

    def build_input_area(self) -> DashComponent:
        return html.Footer(
            className="p-3 bg-light border-top",
            children=[
                dbc.InputGroup(
                    [
                        dbc.Textarea(
                            id="input_textarea",
                            placeholder="Type a message...",
                            maxLength=self.max_chars,
                            rows=2,
                        ),
                        dbc.Button(
                            html.I(className="bi bi-send"),
                            id="submit_button",
                            color="primary",
                            n_clicks=0,
                        ),
                    ]
                ),
                html.Small(
                    self.char_count(""), id="char_count", className="text-muted"
                ),
            ],
        )

    def build_messages(self, messages: List[ChatMessage]) -> List[DashComponent]:
        if not messages:
            return []
        return [self.build_message(msg) for msg in messages]

    def build_message(self, message: ChatMessage) -> DashComponent:
        """Formats a single message as an avatar plus a bubble."""
        is_user = message.role == USER_ROLE
        avatar = html.Div(
            "U" if is_user else "Q",
            className="rounded-circle bg-secondary text-white text-center",
            style={"width": "32px", "height": "32px", "lineHeight": "32px"},
        )
        bubble = html.Div(
            dcc.Markdown(render(message.content), dangerously_allow_html=True),
            className="bubble",
            style={
                "padding": "10px",
                "borderRadius": "15px",
                "maxWidth": "70%",
                "backgroundColor": "#dcf8c6" if is_user else "#ffffff",
                "border": "none" if is_user else "1px solid #eee",
            },
        )
        children = [bubble, avatar] if is_user else [avatar, bubble]
        return html.Div(
            children,
            className=f"message {message.role} d-flex gap-2 mb-2 "
            + ("justify-content-end" if is_user else "justify-content-start"),
        )
