"""
Script to add sample data to the Registrar service via its REST API.
Make sure the server is running before executing this script.

Usage:
    python add_data.py
"""

import os
import sys

import requests


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"


def detect_base_url(session=requests) -> str:
    """Determine a reachable base URL.

    Priority: environment variable `REGISTRAR_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:3000.
    """
    env = os.environ.get("REGISTRAR_BASE_URL")
    if env:
        return env.rstrip("/")

    candidates = [
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    for c in candidates:
        try:
            resp = session.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


def check_server(base_url, session=requests):
    """Check if the server is running."""
    try:
        response = session.get(f"{base_url}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running at {base_url}")
            return True
    except requests.exceptions.RequestException:
        pass

    print(f"{_FAIL_CHAR} Server is not running at {base_url}!")
    print("\nPlease start the server first:")
    print("  python -m registrar.main --port 3000")
    return False


def _create(base_url, resource, data, description, session=requests):
    response = session.post(f"{base_url}/{resource}", json=data)
    if response.status_code == 201:
        print(f"{_OK_CHAR} Created {description}")
        return response.json()
    print(f"{_FAIL_CHAR} Failed to create {description}: {response.text}")
    return None


def create_teacher(base_url, first_name, last_name, email, department, room="", session=requests):
    """Create a new teacher."""
    data = {
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "department": department,
        "room": room
    }
    return _create(base_url, "teachers", data, f"teacher: {first_name} {last_name}", session)


def create_course(base_url, code, name, teacher_id, semester, room, schedule="", session=requests):
    """Create a new course."""
    data = {
        "code": code,
        "name": name,
        "teacherId": teacher_id,
        "semester": semester,
        "room": room,
        "schedule": schedule
    }
    return _create(base_url, "courses", data, f"course: {code} - {name}", session)


def create_student(base_url, first_name, last_name, grade, student_number, homeroom="", session=requests):
    """Create a new student."""
    data = {
        "firstName": first_name,
        "lastName": last_name,
        "grade": grade,
        "studentNumber": student_number,
        "homeroom": homeroom
    }
    return _create(base_url, "students", data, f"student: {first_name} {last_name} ({student_number})", session)


def create_test(base_url, student_id, course_id, test_name, date, mark, out_of, weight=None, session=requests):
    """Record a test result."""
    data = {
        "studentId": student_id,
        "courseId": course_id,
        "testName": test_name,
        "date": date,
        "mark": mark,
        "outOf": out_of,
        "weight": weight
    }
    return _create(base_url, "tests", data, f"test: {test_name} ({mark}/{out_of})", session)


def list_resource(base_url, resource, session=requests):
    """List all records of one resource."""
    response = session.get(f"{base_url}/{resource}", params={"expand": "false"})
    if response.status_code != 200:
        print(f"{_FAIL_CHAR} Failed to list {resource}: {response.text}")
        return []

    records = response.json()
    print(f"\n{'='*60}")
    print(f"{resource.capitalize()} ({len(records)})")
    print(f"{'='*60}")
    for record in records:
        fields = ", ".join(f"{k}={v}" for k, v in record.items() if k != "id")
        print(f"  {str(record['id']):>4} | {fields}")
    return records


def add_sample_data(base_url, session=requests):
    """Create the sample teachers, courses, students and tests; return what was created."""
    print("Creating teachers...")
    teachers = [
        create_teacher(base_url, "Ada", "Lovelace", "ada.lovelace@school.edu", "Mathematics", "204", session=session),
        create_teacher(base_url, "Alan", "Turing", "alan.turing@school.edu", "Computer Science", "310", session=session),
        create_teacher(base_url, "Marie", "Curie", "marie.curie@school.edu", "Science", session=session),
    ]

    print("\nCreating courses...")
    courses = []
    if teachers[0]:
        courses.append(create_course(base_url, "MTH101", "Algebra", teachers[0]["id"], "F24", "204",
                                     "Mon/Wed 09:00", session=session))
    if teachers[1]:
        courses.append(create_course(base_url, "ICS201", "Intro to Programming", teachers[1]["id"], "F24", "310",
                                     "Tue/Thu 10:30", session=session))
    if teachers[2]:
        courses.append(create_course(base_url, "SCH301", "Chemistry", teachers[2]["id"], "W25", "112",
                                     session=session))
    courses = [c for c in courses if c]

    print("\nCreating students...")
    students = [
        create_student(base_url, "Grace", "Hopper", 11, "S1001", "11A", session=session),
        create_student(base_url, "Edsger", "Dijkstra", 12, "S1002", "12B", session=session),
        create_student(base_url, "Barbara", "Liskov", 10, "S1003", session=session),
        create_student(base_url, "Donald", "Knuth", 12, "S1004", "12B", session=session),
    ]
    students = [s for s in students if s]

    print("\nRecording tests...")
    tests = []
    if students and courses:
        tests.append(create_test(base_url, students[0]["id"], courses[0]["id"], "Unit 1 Quiz", "2024-09-20",
                                 18, 20, 0.1, session=session))
        tests.append(create_test(base_url, students[1]["id"], courses[0]["id"], "Unit 1 Quiz", "2024-09-20",
                                 15.5, 20, 0.1, session=session))
        tests.append(create_test(base_url, students[2]["id"], courses[-1]["id"], "Midterm", "2024-10-18",
                                 72, 100, 0.3, session=session))
        tests.append(create_test(base_url, students[-1]["id"], courses[-1]["id"], "Lab Report", "2024-10-04",
                                 9, 10, session=session))
    tests = [t for t in tests if t]

    return {
        "teachers": [t for t in teachers if t],
        "courses": courses,
        "students": students,
        "tests": tests,
    }


def main():
    """Main execution."""
    print("="*60)
    print("Registrar - Data Addition Script")
    print("="*60)
    print()

    base_url = detect_base_url()

    # Check if server is running
    if not check_server(base_url):
        sys.exit(1)

    print("\n" + "="*60)
    print("Adding Sample Data...")
    print("="*60 + "\n")

    add_sample_data(base_url)

    # Display results
    for resource in ("teachers", "courses", "students", "tests"):
        list_resource(base_url, resource)

    print("\n" + "="*60)
    print(f"{_OK_CHAR} Sample data added successfully!")
    print("="*60)
    print("\nYou can now:")
    print(f"  - View API docs: {base_url}/docs")
    print(f"  - List courses with their teachers: curl '{base_url}/courses?expand=true'")
    print(f"  - List tests: curl {base_url}/tests")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{_FAIL_CHAR} Interrupted by user")
        sys.exit(1)
    except requests.exceptions.RequestException as e:
        print(f"\n{_FAIL_CHAR} Request failed: {e}")
        sys.exit(1)
