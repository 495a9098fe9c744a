"""Document pipelines: upload, streamed download and cross-deal listing"""
