from runtpl.main import entrypoint

entrypoint()
