import httplib2
from googleapiclient.errors import HttpError

from gphotos_repro.prober import PROBE_TASK, probe


def test_probe_logs_both_exchanges(context, wire_stream):
    result = probe(context)

    assert result.ok and result.name == PROBE_TASK
    context.drive.create_marker_file_request.return_value.execute.assert_called_once_with()
    context.drive.storage_quota_request.return_value.execute.assert_called_once_with()

    lines = wire_stream.getvalue().splitlines()
    assert [line.split(" ")[1] for line in lines] == ["OUT:", "IN", "OUT:", "IN"]
    assert lines[1].endswith('{"id": "marker-1"}')
    assert '"usage": "1024"' in lines[3]


def test_probe_failure_is_returned_not_raised(context, wire_stream):
    resp = httplib2.Response({"status": 500})
    context.drive.create_marker_file_request.return_value.execute.side_effect = HttpError(resp, b"oops")

    result = probe(context)

    assert not result.ok
    assert isinstance(result.error, HttpError)
    context.drive.storage_quota_request.assert_not_called()
    assert len(wire_stream.getvalue().splitlines()) == 1


def test_quota_failure_after_marker_file(context):
    context.drive.storage_quota_request.return_value.execute.side_effect = TimeoutError("slow")

    result = probe(context)

    assert isinstance(result.error, TimeoutError)
    context.drive.create_marker_file_request.return_value.execute.assert_called_once()
