from __future__ import annotations

from setuptools import find_packages, setup

setup(
    name="movie-catalog",
    version="0.1.0",
    # Repo convention: backend code lives under `backend/`.
    package_dir={"": "backend"},
    packages=find_packages(where="backend", include=["movie_catalog", "movie_catalog.*"]),
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.9",
        "fastapi>=0.110",
        "pydantic>=2.6",
        "python-dotenv>=1.0",
        "uvicorn>=0.27",
    ],
    extras_require={
        # TestClient needs httpx; tests are unittest cases collected by pytest.
        "test": [
            "pytest>=8.0",
            "httpx>=0.27",
        ],
    },
)
