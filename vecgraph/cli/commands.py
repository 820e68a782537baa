"""
vecgraph CLI Commands

Administrative commands over a Neo4j vector store (console script: vecgraph).

Connection settings come from the environment (NEO4J_URI, NEO4J_USER,
NEO4J_PASSWORD, NEO4J_DATABASE, VECTOR_DB).
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click

from vecgraph import __version__
from vecgraph.config import load_settings
from vecgraph.core import Neo4jVectorStore
from vecgraph.errors import VectorStoreError
from vecgraph.logging_config import configure_logging
from vecgraph.pipeline import DocumentInput
from vecgraph.storage.vectors import VectorCache


# ============================================================================
# Helper Functions
# ============================================================================

def run_async(coro):
    """Run async coroutine and return result."""
    return asyncio.run(coro)


def with_store(
    ctx: click.Context,
    action: Callable[[Neo4jVectorStore], Awaitable[Any]],
    cache_dir: Optional[str] = None
) -> Any:
    """Initialize a store, run action against it, always disconnect."""
    async def _run():
        store = Neo4jVectorStore(
            settings=ctx.obj["settings"],
            cache=VectorCache(cache_dir) if cache_dir else None,
        )
        try:
            await store.initialize()
            return await action(store)
        finally:
            await store.disconnect()

    try:
        return run_async(_run())
    except VectorStoreError as e:
        click.echo(f"❌ {e.message}", err=True)
        sys.exit(1)


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


# ============================================================================
# CLI
# ============================================================================

@click.group()
@click.version_option(version=__version__, prog_name='vecgraph')
@click.option('--settings', 'settings_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML file overriding the default settings')
@click.option('--log-level', default='WARNING', help='Log level (DEBUG_NEO4J=true forces DEBUG)')
@click.option('--json-logs', is_flag=True, help='Emit JSON log lines')
@click.pass_context
def cli(ctx, settings_path, log_level, json_logs):
    """vecgraph - namespace-partitioned vector store on Neo4j."""
    configure_logging(log_level, json=json_logs)
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(settings_path)
    except VectorStoreError as e:
        raise click.ClickException(e.message)


@cli.command('heartbeat')
@click.pass_context
def heartbeat(ctx):
    """Check that Neo4j answers queries."""
    result = with_store(ctx, lambda store: store.heartbeat())
    if result["heartbeat"]:
        click.echo("✅ Neo4j is reachable")
    else:
        click.echo("❌ Neo4j heartbeat failed", err=True)
        sys.exit(1)


@cli.command('stats')
@click.argument('namespace')
@click.pass_context
def stats(ctx, namespace):
    """Show the number of vectors in NAMESPACE."""
    echo_json(with_store(ctx, lambda store: store.namespace_stats(namespace=namespace)))


@cli.command('list')
@click.argument('namespace')
@click.pass_context
def list_documents(ctx, namespace):
    """List the documents stored in NAMESPACE."""
    documents = with_store(ctx, lambda store: store.list_documents_in_namespace(namespace))
    if isinstance(documents, dict):
        click.echo(f"❌ {documents['error']}", err=True)
        sys.exit(1)

    click.echo("\n" + "=" * 80)
    click.echo(f"{'Doc ID':<38} {'Chunks':<8} {'Preview':<34}")
    click.echo("=" * 80)
    for doc in documents:
        preview = doc["preview"].replace("\n", " ")[:32]
        click.echo(f"{doc['docId']:<38} {doc['chunkCount']:<8} {preview:<34}")
    click.echo("=" * 80)
    click.echo(f"\nTotal: {len(documents)} documents")


@cli.command('ingest')
@click.argument('namespace')
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--doc-id', help='Document id (default: file name)')
@click.option('--title', help='Document title (default: file name)')
@click.option('--published', help='Publication date written in the chunk header')
@click.option('--cache-dir', type=click.Path(file_okay=False), help='Vector cache directory')
@click.pass_context
def ingest(ctx, namespace, file, doc_id, title, published, cache_dir):
    """Split, embed and store FILE into NAMESPACE.

    Example:
        vecgraph ingest acme contracts/msa.txt --title "Master Services Agreement"
    """
    path = Path(file)
    document = DocumentInput(
        doc_id=doc_id or path.name,
        page_content=path.read_text(encoding="utf-8"),
        metadata={"title": title or path.name, "published": published, "url": f"file://{path.resolve()}"},
    )

    result = with_store(
        ctx,
        lambda store: store.add_document_to_namespace(
            namespace, document, full_file_path=str(path.resolve())
        ),
        cache_dir=cache_dir,
    )

    if result is False:
        click.echo(f"⚠️  {file} is empty, nothing ingested")
    elif result.vectorized:
        source = " (from cache)" if result.from_cache else ""
        click.echo(f"✅ Ingested {result.chunk_count} chunks into {namespace}{source}")
    else:
        click.echo(f"❌ Error ingesting {file}: {result.error}", err=True)
        sys.exit(1)


@cli.command('search')
@click.argument('namespace')
@click.argument('query')
@click.option('--threshold', type=float, default=None, help='Minimum similarity score')
@click.option('--top-n', type=int, default=None, help='Maximum number of results')
@click.option('--knn-depth', type=int, default=None, help='SIMILAR_TO hops (0 = plain cosine)')
@click.option('--exclude', multiple=True, help='Document id to exclude (repeatable)')
@click.pass_context
def search(ctx, namespace, query, threshold, top_n, knn_depth, exclude):
    """Run a hybrid similarity search against NAMESPACE."""
    result = with_store(
        ctx,
        lambda store: store.perform_similarity_search(
            namespace,
            query,
            similarity_threshold=threshold,
            top_n=top_n,
            filter_identifiers=exclude,
            knn_depth=knn_depth,
        ),
    )
    echo_json(result.to_dict())
    if result.error:
        sys.exit(1)


@cli.command('delete-document')
@click.argument('namespace')
@click.argument('doc_id')
@click.pass_context
def delete_document(ctx, namespace, doc_id):
    """Delete every chunk of DOC_ID from NAMESPACE."""
    if with_store(ctx, lambda store: store.delete_document_from_namespace(namespace, doc_id)):
        click.echo(f"✅ Deleted {doc_id} from {namespace}")
    else:
        click.echo(f"❌ No chunks deleted for {doc_id} in {namespace}", err=True)
        sys.exit(1)


@cli.command('delete-namespace')
@click.argument('namespace')
@click.pass_context
def delete_namespace(ctx, namespace):
    """Delete NAMESPACE and its similarity graph."""
    result = with_store(ctx, lambda store: store.delete_namespace(namespace=namespace))
    if "error" in result:
        click.echo(f"❌ {result['error']}", err=True)
        sys.exit(1)
    click.echo(f"✅ {result['message']}")


@cli.command('refresh')
@click.argument('namespace')
@click.pass_context
def refresh(ctx, namespace):
    """Rebuild the vector index, projection and KNN edges of NAMESPACE."""
    report = with_store(ctx, lambda store: store.refresh_namespace(namespace))
    if isinstance(report, dict):
        click.echo(f"❌ {report['error']}", err=True)
        sys.exit(1)

    echo_json(report.summary())
    for error in report.errors:
        click.echo(f"❌ {error}", err=True)
    if not report.ok:
        sys.exit(1)


@cli.command('reset')
@click.option('--yes', is_flag=True, help='Confirm deletion of ALL data')
@click.pass_context
def reset(ctx, yes):
    """Delete every node, relationship and projection in the database."""
    if not yes:
        click.echo("⚠️  This deletes ALL data. Re-run with --yes to confirm.", err=True)
        sys.exit(1)

    result = with_store(ctx, lambda store: store.reset())
    if "error" in result:
        click.echo(f"❌ {result['error']}", err=True)
        sys.exit(1)
    click.echo("✅ Database reset")


if __name__ == '__main__':
    cli()
