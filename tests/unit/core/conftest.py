"""Shared fixtures for core unit tests"""

import pytest

from mdenrich.core.analyze import ContentAnalyzer
from mdenrich.core.frontmatter import FrontmatterRepair
from mdenrich.core.toc import TocBuilder


GUIDE_MD = """\
# Getting Started

This guide walks you through installing the toolkit and running your first build.

## Installation

Install with pip:

```bash
pip install toolkit
```

## Usage

Run the **build** command to generate output.

### Options

Pass flags to tune behavior.
"""

COMPLETE_MD = """\
---
title: "Intro"
description: "An introduction to the project."
---

# Intro

Body text.
"""

TOC_MD = """\
# Guide

Intro text.

## API Reference

Text.

### GET /users/{id}

More.

## API Reference

Dup.
"""


@pytest.fixture(name="analyzer")
def analyzer_fixture():
    return ContentAnalyzer()


@pytest.fixture(name="engine")
def engine_fixture():
    return FrontmatterRepair()


@pytest.fixture(name="toc")
def toc_fixture():
    return TocBuilder()


@pytest.fixture(name="guide_md")
def guide_md_fixture():
    return GUIDE_MD


@pytest.fixture(name="complete_md")
def complete_md_fixture():
    return COMPLETE_MD


@pytest.fixture(name="toc_md")
def toc_md_fixture():
    return TOC_MD
