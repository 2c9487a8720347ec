"""
The main entrypoint for the Quanta package.

This module contains the Quanta application class, which assembles the
pillars (layout, llm, store, reply) around a single message lifecycle engine.
"""

from typing import Optional

from dash import Dash

from . import config, layout, llm, reply, store
from .engine import Engine, LoopThread


class Quanta(Dash):
    """
    A chat widget backed by a server-side relay to an LLM API.

    The conversation lives in one ``Engine``, persisted to one store slot,
    and is driven from a background event loop thread so Dash callbacks can
    call into it from any worker thread.
    """

    def __init__(
        self,
        layout: Optional["layout.Layout"] = None,
        llm: Optional["llm.LLM"] = None,
        store: Optional["store.Store"] = None,
        reply: Optional["reply.Reply"] = None,
        settings: Optional[config.Settings] = None,
        **kwargs,
    ) -> None:
        """
        Initialize the application with configurable pillars.

        Parameters
        ----------
        layout : layout.Layout, optional
            Layout builder for the Dash component tree.
            Defaults to layout.Bootstrap().
        llm : llm.LLM, optional
            Provider used by the HTTP relay and the in-process reply client.
            Defaults to llm.Groq() when GROQ_API_KEY is set, else llm.Echo().
        store : store.Store, optional
            Where the conversation is persisted.
            Defaults to store.File(STORAGE_DIR, key=STORAGE_KEY).
        reply : reply.Reply, optional
            Reply generator used by the engine. Defaults to reply.HTTP when
            API_BASE is set, else reply.Direct around ``llm``.
        settings : config.Settings, optional
            Defaults to config.get_settings().
        **kwargs
            Additional arguments passed to the Dash constructor.

        Raises
        ------
        ValueError
            If the layout is missing component IDs the callbacks need.

        Examples
        --------
        >>> app = Quanta()

        >>> app = Quanta(llm=llm.Echo(), store=store.InMemory())
        """
        llm_module = globals()["llm"]
        store_module = globals()["store"]
        reply_module = globals()["reply"]
        layout_module = globals()["layout"]

        self.settings = settings if settings is not None else config.get_settings()

        self.layout_builder = (
            layout
            if layout is not None
            else layout_module.Bootstrap(max_chars=self.settings.MAX_CHARS)
        )

        if llm is not None:
            self.llm = llm
        elif self.settings.GROQ_API_KEY:
            self.llm = llm_module.Groq(
                api_key=self.settings.GROQ_API_KEY,
                default_model=self.settings.GROQ_MODEL,
            )
        else:
            import warnings

            warnings.warn(
                "Quanta is running with a simple Echo LLM because GROQ_API_KEY is not set. "
                "Add it to the environment or a .env file to get real replies.",
                UserWarning,
            )
            self.llm = llm_module.Echo()

        if "external_stylesheets" not in kwargs:
            kwargs["external_stylesheets"] = []
        kwargs["external_stylesheets"].extend(
            self.layout_builder.get_external_stylesheets()
        )

        if "external_scripts" not in kwargs:
            kwargs["external_scripts"] = []
        kwargs["external_scripts"].extend(self.layout_builder.get_external_scripts())

        kwargs.setdefault("title", "Quanta AI")
        super().__init__(**kwargs)

        self.store = (
            store
            if store is not None
            else store_module.File(
                self.settings.STORAGE_DIR, key=self.settings.STORAGE_KEY
            )
        )
        if reply is not None:
            self.reply = reply
        elif self.settings.API_BASE:
            self.reply = reply_module.HTTP(
                self.settings.API_BASE, timeout=self.settings.REPLY_TIMEOUT
            )
        else:
            self.reply = reply_module.Direct(
                self.llm, timeout=self.settings.REPLY_TIMEOUT
            )

        self.layout = self.layout_builder.build_layout()
        self._validate_layout()

        self.engine = Engine(self.store, self.reply, pacing=self.settings.PACING)
        self.runner = LoopThread()
        self.runner.call(self.engine.start)

        self._register_routes()
        self._register_callbacks()

    def _validate_layout(self) -> None:
        """Checks that the layout holds every component the callbacks use."""
        root = self.layout
        components = [root, *root._traverse()]
        found = {c.id for c in components if isinstance(getattr(c, "id", None), str)}
        missing = layout.REQUIRED_IDS - found
        if missing:
            raise ValueError(
                f"Layout is missing required component IDs: {sorted(missing)}"
            )

    def _register_routes(self) -> None:
        """Registers the HTTP relay endpoints on the Flask server."""
        from .relay import register_routes

        register_routes(self)

    def _register_callbacks(self) -> None:
        """Registers all the callbacks that orchestrate the pillars."""
        from .callbacks import register_callbacks

        register_callbacks(self)
