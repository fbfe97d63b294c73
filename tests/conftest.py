"""
Test fixtures shared across all awaitguard tests.
"""

import pytest


@pytest.fixture
def sample_python_code():
    """Python module with known un-awaited calls."""
    return '''import asyncio
from typing import Awaitable


async def fetch_user(user_id):
    await asyncio.sleep(0)
    return {"id": user_id}


def load_config() -> Awaitable[dict]:
    return fetch_user(0)


async def handler(user_id):
    fetch_user(user_id)
    load_config()
    await fetch_user(user_id)
    return fetch_user(user_id)
'''


@pytest.fixture
def clean_python_code():
    """Python module with no un-awaited calls."""
    return '''
async def fetch_user(user_id):
    return {"id": user_id}


async def handler(user_id):
    user = await fetch_user(user_id)
    print(user)
    return fetch_user(user_id)


def sync_helper():
    fetch_user(1)
'''


@pytest.fixture
def sample_ts_code():
    """TypeScript module with known un-awaited calls."""
    return '''async function save(item: string): Promise<void> {}
function load(): Promise<string> { return Promise.resolve("x"); }

export async function sync(items: string[]) {
  save(items[0]);
  load();
  await save(items[1]);
  return save(items[2]);
}
'''


@pytest.fixture
def clean_ts_code():
    """TypeScript module with no un-awaited calls."""
    return '''async function save(item: string): Promise<void> {}

export async function sync(items: string[]) {
  for (const item of items) {
    await save(item);
  }
  console.log(items.length);
  return save("done");
}
'''


@pytest.fixture
def sample_files(sample_python_code, sample_ts_code):
    """Sample file inputs for API testing."""
    from awaitguard.models.scan_models import FileInput
    return [
        FileInput(path="handler.py", content=sample_python_code),
        FileInput(path="sync.ts", content=sample_ts_code),
    ]
