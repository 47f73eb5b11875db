# task_manager/api/__init__.py
