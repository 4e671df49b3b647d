"""Shared pytest fixtures for rstxref tests."""

from pathlib import Path

import pytest

GEO_CORPUS = {
    "index.txt": """\
==============
MongoDB Manual
==============

.. toctree::
   :titlesonly:

   Geospatial Queries </geospatial-queries>
   /release-notes

See :ref:`geospatial-queries` and :doc:`/release-notes`.
""",
    "geospatial-queries.txt": """\
.. _geospatial-queries:

==================
Geospatial Queries
==================

.. include:: /includes/fact-2dsphere.rst

Use :query:`$near` with a :dbcommand:`geoNear` fallback.

.. code-block:: javascript

   db.places.find( { loc: { $near: point } } )  // :ref:`not-a-ref`

.. note::

   See :ref:`also-not-scanned`.

Query Operators
---------------

.. query:: $near

   Returns documents near a point.
""",
    "reference/command/geoNear.txt": """\
=======
geoNear
=======

.. dbcommand:: geoNear

   Performs a geospatial query. See :issue:`SERVER-12345`.
""",
    "release-notes.txt": """\
.. _release-notes:

=============
Release Notes
=============

.. _2dsphere-index:

2dsphere Version 2
------------------

Fixes :issue:`SERVER-9647`.
""",
    "includes/fact-2dsphere.rst": """\
A :ref:`2dsphere index <2dsphere-index>` supports queries on a sphere.
""",
}


@pytest.fixture
def geo_texts():
    """A small, clean corpus in the style of the MongoDB geospatial docs."""
    return dict(GEO_CORPUS)


@pytest.fixture
def make_corpus():
    """Factory building a Corpus from {path: text}."""
    from rstxref.core.loader import Corpus

    def _make(texts, config=None):
        return Corpus.from_texts(texts, config)

    return _make


@pytest.fixture
def write_tree(tmp_path):
    """Factory writing {relative path: text} under tmp_path/source."""

    def _write(texts, root_name="source") -> Path:
        root = tmp_path / root_name
        for rel_path, text in texts.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def config_with():
    """Factory merging overrides over the default config."""
    from rstxref.config import DEFAULT_CONFIG, merge_configs

    def _config(overrides):
        return merge_configs(DEFAULT_CONFIG, overrides)

    return _config
