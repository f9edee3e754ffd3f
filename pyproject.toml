[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rpckit"
version = "0.1.0"
description = "Asynchronous RPC building blocks: framed JSON/CBOR message streams, mutual-TLS contexts, request encoding and JavaScript/Python code generation from interface classes"
requires-python = ">=3.10"
dependencies = [
    "cbor2",
    "cryptography",
]
keywords = ["rpc", "asyncio", "cbor", "json", "tls", "varint", "codegen"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Object Brokering",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["rpckit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
