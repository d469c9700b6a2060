"""
Shared Test Fixtures
====================

Fixtures for driving the chatbot deterministically: a virtual clock
scheduler, an executor that runs work inline, and small rule sets.
"""

import random
import sys
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from conversation.context import ContextStore
from conversation.matcher import ConversationMatcher
from conversation.rules import Rule, RuleTable
from core.scheduler import ManualScheduler
from services.chat_responder import ChatResponder


class ImmediateExecutor(Executor):
    """Executor that runs submitted work on the calling thread."""

    def __init__(self):
        self.shutdown_called = False

    def submit(self, fn, *args, **kwargs):
        if self.shutdown_called:
            raise RuntimeError("cannot schedule new futures after shutdown")

        future = Future()
        future.set_running_or_notify_cancel()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True, *, cancel_futures=False):
        self.shutdown_called = True


class ManualLookup:
    """Definition lookup whose futures are completed by the test."""

    def __init__(self):
        self.words = []
        self.futures = []

    def __call__(self, word):
        future = Future()
        self.words.append(word)
        self.futures.append(future)
        return future

    def resolve(self, definition, index=-1):
        future = self.futures[index]
        if not future.cancelled():
            future.set_result(definition)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def executor():
    return ImmediateExecutor()


@pytest.fixture
def lookup():
    return ManualLookup()


@pytest.fixture
def name_rules():
    return [
        Rule("greeting", r"\bhello\b", ("Hello there [name]!",)),
        Rule("name", r"my\sname\sis\s(\w+)", ("Nice to meet you [name]!",)),
        Rule("name", r"what\sis\smy\sname", ("Your name is [name].",)),
        Rule("definition", r"definition\sof\s(\w+)", ("Looking it up.",)),
    ]


@pytest.fixture
def context():
    return ContextStore()


@pytest.fixture
def matcher(name_rules, context, lookup):
    return ConversationMatcher(
        RuleTable(name_rules), context, lookup=lookup, rng=random.Random(0)
    )


@pytest.fixture
def responder(matcher, context):
    return ChatResponder(matcher, context)
