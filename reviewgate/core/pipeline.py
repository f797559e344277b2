"""
Review Pipeline — Main orchestrator for a complete review.

Full pipeline:
1. Validate and parse the source
2. Run the rule engine → category scores and critical issues
3. Extract structural metrics
4. Decide review readiness
5. Compute the Review Cost Index
6. Derive the verdict and badge
7. Fingerprint the analyzed content

Every step is a pure function of the source text; the same input always
produces the same report apart from ``analysis_time_ms``.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

from reviewgate.core.aggregator import analyze_files, failed_analysis, score_tree, validate_source
from reviewgate.core.decision import OverrideMode, determine_decision, syntax_error_decision
from reviewgate.core.metrics import extract_metrics
from reviewgate.core.parser import parse_file
from reviewgate.core.proof import bundle_content, proof_hash
from reviewgate.core.review_cost import calculate_rci, syntax_error_rci
from reviewgate.core.rule_engine import RuleEngine
from reviewgate.core.verdict import determine_verdict, verdict_badge
from reviewgate.errors import CodeSyntaxError, InternalAnalysisError, ReviewGateError
from reviewgate.models.review_models import BatchReviewReport, FileInput, ReviewReport

logger = logging.getLogger("reviewgate.pipeline")


class ReviewPipeline:
    """
    Review pipeline orchestrator.

    Ties together: parser → rule engine → aggregator → metrics →
    decision → review cost → verdict → proof hash.
    """

    def __init__(self, override_mode: OverrideMode = "severity", engine: RuleEngine | None = None) -> None:
        self.override_mode = override_mode
        self.engine = engine or RuleEngine()

    def review(self, source: str, filename: str = "code.js") -> ReviewReport:
        """
        Review a single source text.

        Raises:
            SourceValidationError: source is not a string, is blank or is not valid UTF-8.
            InternalAnalysisError: an unexpected failure inside the engine.
        """
        code = validate_source(source)
        start_time = time.monotonic()

        try:
            report = self._review(code, filename)
        except ReviewGateError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected failure while reviewing {filename}")
            raise InternalAnalysisError() from e

        report.analysis_time_ms = round((time.monotonic() - start_time) * 1000, 2)
        logger.info(
            f"Reviewed {filename}: score {report.analysis.total_score}/100, "
            f"{report.decision.decision.value}, {report.verdict.verdict.value} "
            f"({report.analysis_time_ms}ms)"
        )
        return report

    def review_files(self, files: Sequence[FileInput]) -> BatchReviewReport:
        """
        Review several files as one change set.

        Decision and verdict are taken on the averaged aggregate; any CRITICAL
        issue in any file blocks the whole batch.
        """
        start_time = time.monotonic()

        try:
            batch = analyze_files(files)
            aggregated = batch.aggregated
            decision = determine_decision(aggregated, self.override_mode)
            verdict = determine_verdict(aggregated.total_score, batch.critical_issues, aggregated)
            report = BatchReviewReport(
                files=batch.files,
                aggregated=aggregated,
                critical_issues=batch.critical_issues,
                decision=decision,
                verdict=verdict,
                badge=verdict_badge(verdict.verdict, aggregated.total_score),
                proof_hash=proof_hash(bundle_content(files)),
                file_count=len(batch.files),
            )
        except ReviewGateError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected failure while reviewing {len(files)} files")
            raise InternalAnalysisError() from e

        report.analysis_time_ms = round((time.monotonic() - start_time) * 1000, 2)
        logger.info(
            f"Reviewed {report.file_count} files: aggregate {aggregated.total_score}/100, "
            f"{report.verdict.verdict.value} ({report.analysis_time_ms}ms)"
        )
        return report

    def _review(self, code: str, filename: str) -> ReviewReport:
        try:
            tree = parse_file(code, filename)
        except CodeSyntaxError as e:
            logger.info(f"{filename}: {e.message}")
            analysis = failed_analysis(filename, e.message)
            verdict = determine_verdict(analysis.total_score, analysis.critical_issues, analysis, filename)
            return ReviewReport(
                filename=filename,
                analysis=analysis,
                metrics=None,
                decision=syntax_error_decision(analysis, self.override_mode),
                review_cost=syntax_error_rci(),
                verdict=verdict,
                badge=verdict_badge(verdict.verdict, analysis.total_score),
                proof_hash=proof_hash(code),
            )

        analysis = score_tree(tree, filename, self.engine)
        metrics = extract_metrics(tree)
        verdict = determine_verdict(analysis.total_score, analysis.critical_issues, analysis, filename)

        return ReviewReport(
            filename=filename,
            analysis=analysis,
            metrics=metrics,
            decision=determine_decision(analysis, self.override_mode),
            review_cost=calculate_rci(metrics, analysis.security.score),
            verdict=verdict,
            badge=verdict_badge(verdict.verdict, analysis.total_score),
            proof_hash=proof_hash(code),
        )


def review(source: str, filename: str = "code.js", override_mode: OverrideMode = "severity") -> ReviewReport:
    return ReviewPipeline(override_mode).review(source, filename)


def review_files(files: Sequence[FileInput], override_mode: OverrideMode = "severity") -> BatchReviewReport:
    return ReviewPipeline(override_mode).review_files(files)
