"""
Utility Scripts.

- run_job.py: Run the collection cycle or weekly digest once

Run scripts with: python -m scripts.run_job collect
"""
