"""
vecgraph Setup Script

Install with: pip install -e .
Embeddings:   pip install -e .[embeddings]
Tests:        pip install -e .[test]
"""

from setuptools import setup, find_packages

setup(
    name='vecgraph',
    version='0.1.0',
    description='Namespace-partitioned vector store on Neo4j with KNN graph-augmented similarity search',
    packages=find_packages(include=['vecgraph', 'vecgraph.*']),
    package_data={
        'vecgraph.config': ['defaults.yaml'],
    },
    install_requires=[
        'neo4j>=5.14.0',
        'structlog>=23.2.0',
        'pyyaml>=6.0.1',
        'numpy>=1.26.0',
        'click>=8.1.0',
        'langchain-text-splitters>=0.2.0',
    ],
    extras_require={
        'embeddings': [
            'sentence-transformers>=2.2.0',
            'torch>=2.0.0',
        ],
        'test': [
            'pytest>=7.4.0',
            'pytest-asyncio>=0.23.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'vecgraph=vecgraph.cli.commands:cli',
        ],
    },
    python_requires='>=3.11',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Database',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
    ],
)
