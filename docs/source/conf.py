import os
import sys
sys.path.insert(0, os.path.abspath('../..'))

# Project information
project = 'Drivemap'
copyright = '2024, Drivemap Authors'
author = 'Drivemap Authors'
release = '0.1.0'

# Sphinx general settings
extensions = [
    'sphinx.ext.autodoc',
    'sphinxarg.ext',
]
autodoc_mock_imports = ['wmi']
templates_path = ['_templates']
exclude_patterns = []
language = 'en'

# HTML output settings
html_theme = 'alabaster'
html_static_path = ['_static']
html_sidebars = {
    '**': [
        'about.html',
        'navigation.html',
        'relations.html',
        'searchbox.html',
    ]
}
