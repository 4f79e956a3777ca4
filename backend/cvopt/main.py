# Headless run of the optimisation pipeline over local files.
# Reads a CV PDF and a job description, writes the optimised PDF to the
# output directory and prints the evaluation.
import argparse
import asyncio
import mimetypes
import os
import sys
from datetime import datetime as dt

from dotenv import load_dotenv

from .core.generator import ResumeGenerator
from .factories.prompt_factory import PromptFactory
from .rendering.renderer import PDFRenderer
from .spec.loader import load_server_config
from .storage.store import LocalDocumentStore
from .utils.errors import OptimizationError
from .utils.logger import JSONLLogger
from .workflows.executor import OptimizationPipeline

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Optimise a CV for a job description.")

    time = dt.now().strftime("%Y-%m-%d_%H-%M-%S")
    parser.add_argument("--cv", default="input/cv.pdf", help="Path to the CV document")
    parser.add_argument("--job", default="input/job.txt", help="Path to a job description text file")
    parser.add_argument("--config", default=None, help="Path to the server YAML config")
    parser.add_argument("--test_name", default=time)
    return parser

def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    config = load_server_config(args.config)
    logger = JSONLLogger(log_path=os.path.join(config.log_dir, f"headless_log_{args.test_name}.jsonl"))

    try:
        with open(args.cv, "rb") as f:
            document = f.read()
    except OSError as e:
        logger.log_error(args.test_name, "input", f"Cannot read CV {args.cv}: {e}")
        print(f"Cannot read CV {args.cv}: {e.strerror or e}", file=sys.stderr)
        return 1

    job_description = None
    if os.path.exists(args.job):
        with open(args.job, "r", encoding="utf-8") as f:
            job_description = f.read()

    prompt_factory = PromptFactory(
        marker=config.marker,
        default_job_description=config.default_job_description,
    )
    pipeline = OptimizationPipeline(
        generator=ResumeGenerator(prompt_factory=prompt_factory, config=config.generator),
        renderer=PDFRenderer(store=LocalDocumentStore(config.output_dir), config=config.renderer),
        marker=config.marker,
        logger=logger,
    )

    mime_type = mimetypes.guess_type(args.cv)[0] or "application/pdf"
    try:
        result = asyncio.run(pipeline.run(
            document=document,
            job_description=job_description,
            mime_type=mime_type,
            filename=os.path.basename(args.cv),
            request_id=args.test_name,
        ))
    except OptimizationError as e:
        logger.log_error(args.test_name, e.stage, e.message)
        print(f"Optimisation failed during {e.stage}: {e.message}", file=sys.stderr)
        return 1

    print("\n" + "="*60)
    print("CV OPTIMISATION COMPLETE\n" + "="*60)
    print(result.frontendContent or "(no evaluation section in response)")
    print("="*60)
    print(f"Document written to {os.path.join(config.output_dir, result.filename)}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
