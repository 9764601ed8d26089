# Marks `medinventory.deps` as a real package so `from medinventory.deps.store import get_store` resolves.
