"""
Cypher Statements
=================

Every statement the adapter sends to Neo4j.

The namespace is always a bound parameter ($namespace) matched against the
`namespace` property of :Chunk nodes, never interpolated into the statement.
The only interpolated value is the traversal depth of the hybrid search,
which Cypher does not accept as a parameter and which is validated as an
integer before formatting.
"""

CHUNK_LABEL = "Chunk"
SIMILARITY_RELATIONSHIP = "SIMILAR_TO"
SIMILARITY_PROPERTY = "similarity"
EMBEDDING_PROPERTY = "embedding"
VECTOR_INDEX_NAME = "chunkEmbeddingIndex"
PROJECTION_PREFIX = "chunkGraph_"

# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------

HEARTBEAT = "RETURN 1 AS ok"

# -----------------------------------------------------------------------------
# Namespace store
# -----------------------------------------------------------------------------

COUNT_CHUNKS = """
MATCH (c:Chunk {namespace: $namespace})
RETURN count(c) AS count
"""

INSERT_CHUNKS = """
UNWIND $chunks AS chunk
CREATE (c:Chunk {
    namespace: $namespace,
    docId: chunk.docId,
    chunkId: chunk.chunkId,
    pageContent: chunk.pageContent,
    metadata: chunk.metadata,
    embedding: chunk.embedding
})
RETURN count(c) AS created
"""

DELETE_DOCUMENT = """
MATCH (c:Chunk {namespace: $namespace, docId: $docId})
DETACH DELETE c
RETURN count(c) AS deletedCount
"""

DELETE_NAMESPACE = """
MATCH (c:Chunk {namespace: $namespace})
DETACH DELETE c
RETURN count(c) AS deletedCount
"""

RESET_ALL = """
MATCH (n)
DETACH DELETE n
"""

LIST_NAMESPACES = """
MATCH (c:Chunk)
RETURN DISTINCT c.namespace AS namespace
ORDER BY namespace
"""

LIST_DOCUMENTS = """
MATCH (c:Chunk {namespace: $namespace})
WITH c.docId AS docId, collect(c) AS chunks
RETURN docId,
       size(chunks) AS chunkCount,
       chunks[0].pageContent AS pageContent,
       chunks[0].metadata AS metadata
ORDER BY docId
"""

EMBEDDING_DIMENSION = """
MATCH (c:Chunk {namespace: $namespace})
WHERE c.embedding IS NOT NULL
RETURN size(c.embedding) AS dimension
LIMIT 1
"""

# -----------------------------------------------------------------------------
# Index / graph maintenance
# -----------------------------------------------------------------------------

SHOW_VECTOR_INDEX = """
SHOW INDEXES YIELD name, type, options
WHERE name = $name AND type = 'VECTOR'
RETURN name, options
"""

CREATE_VECTOR_INDEX = """
CALL db.index.vector.createNodeIndex($name, 'Chunk', 'embedding', $dimension, 'cosine')
"""

GRAPH_EXISTS = """
CALL gds.graph.exists($graphName)
YIELD exists
RETURN exists
"""

GRAPH_DROP = """
CALL gds.graph.drop($graphName, false)
YIELD graphName
RETURN graphName
"""

LIST_PROJECTIONS = """
CALL gds.graph.list()
YIELD graphName
RETURN graphName
"""

PROJECT_GRAPH = """
MATCH (c:Chunk {namespace: $namespace})
WHERE c.embedding IS NOT NULL
WITH gds.graph.project(
    $graphName,
    c,
    null,
    {sourceNodeProperties: c {.embedding}}
) AS g
RETURN g.graphName AS graphName, g.nodeCount AS nodeCount, g.relationshipCount AS relationshipCount
"""

DELETE_SIMILARITY_EDGES = """
MATCH (:Chunk {namespace: $namespace})-[r:SIMILAR_TO]->()
DELETE r
RETURN count(r) AS deleted
"""

KNN_WRITE = """
CALL gds.knn.write($graphName, {
    topK: $topK,
    nodeProperties: ['embedding'],
    similarityCutoff: $similarityCutoff,
    concurrency: $concurrency,
    randomSeed: $randomSeed,
    writeRelationshipType: 'SIMILAR_TO',
    writeProperty: 'similarity'
})
YIELD relationshipsWritten, nodesCompared
RETURN relationshipsWritten, nodesCompared
"""

# -----------------------------------------------------------------------------
# Hybrid similarity search
# -----------------------------------------------------------------------------

DIRECT_SIMILARITY = """
MATCH (n:Chunk {namespace: $namespace})
WHERE n.embedding IS NOT NULL AND NOT n.docId IN $excludeDocIds
WITH n, gds.similarity.cosine(n.embedding, $queryVector) AS directSimilarity
WHERE directSimilarity >= $threshold
RETURN n.chunkId AS chunkId,
       n.docId AS docId,
       n.pageContent AS contextText,
       n.metadata AS metadata,
       directSimilarity,
       [] AS pathSimilarities
"""

# Formatted with the validated integer traversal depth (>= 1)
HYBRID_SIMILARITY = """
MATCH (n:Chunk {namespace: $namespace})
WHERE n.embedding IS NOT NULL AND NOT n.docId IN $excludeDocIds
WITH n, gds.similarity.cosine(n.embedding, $queryVector) AS directSimilarity
WHERE directSimilarity >= $threshold
OPTIONAL MATCH (n)-[rels:SIMILAR_TO*1..%(depth)d]-(:Chunk {namespace: $namespace})
WHERE all(rel IN rels WHERE rel.similarity >= $threshold)
WITH n, directSimilarity,
     collect(reduce(s = 1.0, rel IN rels | s * rel.similarity)) AS pathSimilarities
RETURN n.chunkId AS chunkId,
       n.docId AS docId,
       n.pageContent AS contextText,
       n.metadata AS metadata,
       directSimilarity,
       pathSimilarities
"""


def hybrid_similarity_statement(depth: int) -> str:
    """Return the search statement for a traversal depth in 0..MAX."""
    if not isinstance(depth, int) or isinstance(depth, bool) or depth < 0:
        raise ValueError(f"knn depth must be a non-negative integer, got {depth!r}")
    if depth == 0:
        return DIRECT_SIMILARITY
    return HYBRID_SIMILARITY % {"depth": depth}


def projection_name(namespace: str) -> str:
    """Name of the in-memory GDS projection for a (validated) namespace."""
    return f"{PROJECTION_PREFIX}{namespace}"
