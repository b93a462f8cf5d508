"""eventloader -- load events from a remote API with an offline cache fallback.

Every successful fetch is written back to a local disk cache.  When a
later fetch fails for a transient reason (network error, unexpected
status, malformed payload) the cached copy is served instead.  A rejected
session is never papered over with cached data: it propagates so the
caller can ask the user to sign in again.

Typical use::

    from eventloader.orchestrator import open_event_loader

    async with open_event_loader(profile, config.cache, cache_dir) as loader:
        event = await loader.load("g1")

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic configuration models and domain entities.
    mapper: JSON <-> entity mapping shared by the remote and cache paths.
    client: HTTP transport adapter.
    cache: JSON cache adapter and disk blob store.
    loaders: Remote-backed and cache-backed loaders.
    orchestrator: Remote-first loading with cache fallback and write-back.
    config: XDG-aware configuration and profile management.
    exceptions: Classified error hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
