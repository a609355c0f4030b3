"""
EduLearn Report Workflow Test Suite

Organized by:
- test_00_normalizer.py: Payload normalization and envelopes
- test_01_fallback.py: Candidate endpoint probing
- test_02_client.py: REST client against the in-memory backend
- test_03_workflow.py: Lifecycle, gates and action guard
- test_04_summary.py: Report card rows, grades and feedback
- test_05_polling.py: Poller cancellation and fan-out fetches
- test_06_end_to_end.py: Learner -> approver -> learner round trips
- test_07_review_learner.py: Review queue, learner report page, rendering and CLI
"""
