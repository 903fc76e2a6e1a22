from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from typing import TYPE_CHECKING

from log_helper import LogHelper

from . import PathTree, QuerySpec
from .options import CompilerOptions
from .query_compiler import QueryCompiler

try:
    from neo4j import GraphDatabase
except ImportError:  # pragma: no cover
    GraphDatabase = None  # type: ignore


if TYPE_CHECKING:
    from neo4j import Driver as Neo4jDriver
else:
    Neo4jDriver = Any

logger = LogHelper.get_logger("pathquery.neo4j")


class Neo4jContext:

    def __init__(self, uri: str, auth: Tuple[str, str], database: Optional[str] = None,
                 options: Optional[CompilerOptions] = None):
        if GraphDatabase is None:
            raise RuntimeError("neo4j driver not installed. pip install neo4j")
        self._driver: Neo4jDriver = GraphDatabase.driver(uri, auth=auth)
        self._database = database
        self._compiler = QueryCompiler(options)

    def close(self) -> None:
        self._driver.close()

    def __enter__(self) -> "Neo4jContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def compile(self, tree: PathTree, spec: QuerySpec) -> str:
        return self._compiler.to_cypher(tree, spec)

    def run(self, tree: PathTree, spec: QuerySpec,
            params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return self._execute(self.compile(tree, spec), params or {})

    def execute_cypher(self, cypher: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return self._execute(cypher, params or {})

    def _execute(self, cypher: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        def work(tx):
            result = tx.run(cypher, **params)
            return [r.data() for r in result]
        logger.info(f"run: {cypher}")
        if self._database:
            with self._driver.session(database=self._database) as s:
                return s.execute_read(work)
        with self._driver.session() as s:
            return s.execute_read(work)
