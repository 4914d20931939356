"""SRG pipeline entrypoints."""


def run_srg_pipeline(*args, **kwargs):
    from srgscan.pipeline.run import run_srg_pipeline as _run_srg_pipeline

    return _run_srg_pipeline(*args, **kwargs)


def run_from_config(*args, **kwargs):
    from srgscan.pipeline.run import run_from_config as _run_from_config

    return _run_from_config(*args, **kwargs)


__all__ = ["run_srg_pipeline", "run_from_config"]
