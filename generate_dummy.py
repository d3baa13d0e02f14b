# generate_dummy.py
import sys


def main():
    if len(sys.argv) < 2:
        print("Usage: python3 generate_dummy.py <num_lines> [output_file]")
        sys.exit(1)

    num_lines = int(sys.argv[1])
    output_file = sys.argv[2] if len(sys.argv) > 2 else "dummy.txt"

    buffer_size = 10000

    with open(output_file, 'w', encoding='ascii', newline='\n') as f:
        for start in range(0, num_lines, buffer_size):
            end = min(start + buffer_size, num_lines)
            # every 100th line is empty to exercise zero-length reads
            lines = ["\n" if i % 100 == 99 else f"Line {i + 1}: {'x' * (i % 50)}\n"
                     for i in range(start, end)]
            f.writelines(lines)

    print(f"Generated {num_lines} lines in {output_file}")


if __name__ == "__main__":
    main()
