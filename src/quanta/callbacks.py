"""Dash callbacks connecting the UI to the engine."""

from dash import ALL, Input, Output, State, callback_context, no_update


def register_callbacks(app):
    @app.callback(
        [
            Output("messages_container", "children"),
            Output("input_textarea", "value"),
            Output("pending_prompt", "data"),
            Output("submit_button", "disabled"),
        ],
        [Input("submit_button", "n_clicks")],
        [State("input_textarea", "value")],
        prevent_initial_call=True,
    )
    def send_message(n_clicks, user_input):
        if not n_clicks or not user_input or not user_input.strip():
            return no_update, no_update, no_update, no_update

        text = user_input[: app.layout_builder.max_chars]
        message = app.runner.run(app.engine.post(text))
        if message is None:
            return no_update, no_update, no_update, no_update
        pending = {"id": message.id, "prompt": message.content}
        return app.layout_builder.build_messages(app.engine.messages), "", pending, True

    @app.callback(
        [
            Output("messages_container", "children", allow_duplicate=True),
            Output("submit_button", "disabled", allow_duplicate=True),
        ],
        [Input("pending_prompt", "data")],
        running=[
            (Output("typing_indicator", "hidden"), False, True),
            (Output("input_textarea", "disabled"), True, False),
        ],
        prevent_initial_call=True,
    )
    def fetch_reply(pending):
        if not pending:
            return no_update, no_update

        app.runner.run(app.engine.respond())
        return app.layout_builder.build_messages(app.engine.messages), False

    @app.callback(
        [
            Output("messages_container", "children", allow_duplicate=True),
            Output("pending_prompt", "data", allow_duplicate=True),
        ],
        Input("url_location", "pathname"),
        prevent_initial_call="initial_duplicate",
    )
    def load_conversation(pathname):
        messages = app.engine.messages
        pending = no_update
        # a prompt posted before the page was reloaded still needs its reply
        if app.engine.pending is not None:
            pending = {"id": messages[-1].id, "prompt": app.engine.pending}
        return app.layout_builder.build_messages(messages), pending

    @app.callback(
        [
            Output("messages_container", "children", allow_duplicate=True),
            Output("submit_button", "disabled", allow_duplicate=True),
        ],
        Input("new_conversation_button", "n_clicks"),
        prevent_initial_call=True,
    )
    def create_new_chat(n_clicks):
        if not n_clicks:
            return no_update, no_update
        app.runner.call(app.engine.reset)
        return app.layout_builder.build_messages(app.engine.messages), False

    @app.callback(
        Output("input_textarea", "value", allow_duplicate=True),
        Input({"type": "suggestion", "index": ALL}, "n_clicks"),
        prevent_initial_call=True,
    )
    def insert_suggestion(n_clicks):
        if not any(n_clicks):
            return no_update
        label = callback_context.triggered_id["index"]
        return app.layout_builder.suggested_prompt(label)

    @app.callback(
        Output("char_count", "children"),
        Input("input_textarea", "value"),
    )
    def update_char_count(value):
        return app.layout_builder.char_count(value)

    _register_clientside_callbacks(app)


def _register_clientside_callbacks(app):
    app.clientside_callback(
        """
        function(pathname) {
            // Enter sends, Shift+Enter inserts a newline
            setTimeout(function() {
                const textarea = document.getElementById('input_textarea');
                const submitButton = document.getElementById('submit_button');

                if (textarea && submitButton && !window.enterListenerSetup) {
                    window.enterListenerSetup = true;
                    textarea.addEventListener('keydown', function(e) {
                        if (e.key === 'Enter' && !e.shiftKey) {
                            e.preventDefault();
                            if (textarea.value.trim()) {
                                submitButton.click();
                            }
                        }
                    });
                }
            }, 100);

            return window.dash_clientside.no_update;
        }
        """,
        Output("submit_button", "n_clicks", allow_duplicate=True),
        [Input("url_location", "pathname")],
        prevent_initial_call="initial_duplicate",
    )

    # Auto-scroll to bottom
    app.clientside_callback(
        """
        function(messages_content) {
            if (messages_content && messages_content.length > 0) {
                setTimeout(function() {
                    const container = document.getElementById('messages_container');
                    if (container && container.parentElement) {
                        container.parentElement.scrollTo({
                            top: container.parentElement.scrollHeight,
                            behavior: 'smooth'
                        });
                    }
                }, 100);
            }
            return window.dash_clientside.no_update;
        }
        """,
        Output("messages_container", "data-scroll-trigger", allow_duplicate=True),
        [Input("messages_container", "children")],
        prevent_initial_call=True,
    )
